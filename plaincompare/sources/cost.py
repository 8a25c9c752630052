"""
Cost of living source.

Canonical source for metros (msas) and states. Also provides the cost
dimension: regional price parity for all items (rpp_all).
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from plaincompare.sources.utils import to_float

logger = logging.getLogger(__name__)

SOURCE_KEY = "cost"


def fetch_metro_rows(engine: Engine) -> List[Dict]:
    """Canonical metro rows: cbsa, name, slug, state_abbr."""
    query = text("""
        SELECT cbsa, name, slug, state_abbr
        FROM msas
        ORDER BY name COLLATE NOCASE
    """)
    with engine.connect() as conn:
        rows = conn.execute(query).mappings().fetchall()
    logger.info(f"Cost source metros: {len(rows)}")
    return [dict(r) for r in rows]


def fetch_state_rows(engine: Engine) -> List[Dict]:
    """Canonical state rows: abbr, name, slug."""
    query = text("""
        SELECT abbr, name, slug
        FROM states
        ORDER BY name COLLATE NOCASE
    """)
    with engine.connect() as conn:
        rows = conn.execute(query).mappings().fetchall()
    logger.info(f"Cost source states: {len(rows)}")
    return [dict(r) for r in rows]


def fetch_metro_rpp(engine: Engine) -> Dict[str, Optional[float]]:
    """rpp_all keyed by CBSA code."""
    with engine.connect() as conn:
        rows = conn.execute(text("SELECT cbsa, rpp_all FROM msas")).fetchall()
    return {str(r[0]): to_float(r[1]) for r in rows}


def fetch_state_rpp(engine: Engine) -> Dict[str, Optional[float]]:
    """rpp_all keyed by state abbreviation."""
    with engine.connect() as conn:
        rows = conn.execute(text("SELECT abbr, rpp_all FROM states")).fetchall()
    return {str(r[0]): to_float(r[1]) for r in rows}
