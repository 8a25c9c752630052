"""
Childcare source.

Canonical source for counties (it carries slugs, names, state codes and
population). Provides the childcare dimension: average center-based infant
care price by state.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from plaincompare.sources.utils import to_float

logger = logging.getLogger(__name__)

SOURCE_KEY = "childcare"


def fetch_county_rows(engine: Engine) -> List[Dict]:
    """Canonical county rows: fips, name, state_abbr, slug, population."""
    query = text("""
        SELECT fips, name, state AS state_abbr, slug, population
        FROM counties
        ORDER BY name COLLATE NOCASE
    """)
    with engine.connect() as conn:
        rows = conn.execute(query).mappings().fetchall()
    logger.info(f"Childcare source counties: {len(rows)}")
    return [dict(r) for r in rows]


def fetch_state_infant_price(engine: Engine) -> Dict[str, Optional[float]]:
    """avg_center_infant keyed by state abbreviation."""
    with engine.connect() as conn:
        rows = conn.execute(text("SELECT abbr, avg_center_infant FROM states")).fetchall()
    return {str(r[0]): to_float(r[1]) for r in rows}
