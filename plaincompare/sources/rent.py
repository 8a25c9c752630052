"""
Fair market rent source.

Metros: two-bedroom FMR from the latest year available for each CBSA.
States: mean county two-bedroom FMR for the latest county year.
"""

import logging
from typing import Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from plaincompare.sources.utils import to_float

logger = logging.getLogger(__name__)

SOURCE_KEY = "rent"


def fetch_metro_rent(engine: Engine) -> Dict[str, Optional[float]]:
    """Latest-year br2 keyed by CBSA code."""
    query = text("""
        SELECT f.cbsa_code, f.br2
        FROM fmr_metro f
        JOIN (
            SELECT cbsa_code, MAX(year) AS year
            FROM fmr_metro
            GROUP BY cbsa_code
        ) latest
          ON f.cbsa_code = latest.cbsa_code AND f.year = latest.year
    """)
    with engine.connect() as conn:
        rows = conn.execute(query).fetchall()
    return {str(r[0]): to_float(r[1]) for r in rows}


def fetch_state_rent(engine: Engine) -> Dict[str, Optional[float]]:
    """Average county br2 for the latest county year, keyed by state abbreviation."""
    query = text("""
        SELECT s.state_abbr, AVG(fc.br2) AS br2
        FROM fmr_county fc
        JOIN counties c ON fc.fips = c.fips
        JOIN states s ON c.state_code = s.state_code
        WHERE fc.year = (SELECT MAX(year) FROM fmr_county)
          AND fc.br2 IS NOT NULL
        GROUP BY s.state_abbr
    """)
    with engine.connect() as conn:
        rows = conn.execute(query).fetchall()
    return {str(r[0]): to_float(r[1]) for r in rows}
