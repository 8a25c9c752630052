"""
Crime source (state level only).

Provides the state abbreviation to FIPS lookup used by the state join and
the crime dimension: violent crimes per 100,000 residents, latest year.
"""

import logging
from typing import Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from plaincompare.sources.utils import rate_per_100k

logger = logging.getLogger(__name__)

SOURCE_KEY = "crime"


def fetch_state_fips(engine: Engine) -> Dict[str, str]:
    """state_abbr -> state_fips."""
    with engine.connect() as conn:
        rows = conn.execute(text("SELECT state_abbr, state_fips FROM states")).fetchall()
    return {str(r[0]): str(r[1]) for r in rows if r[0] and r[1]}


def fetch_state_violent_rate(engine: Engine) -> Dict[str, Optional[float]]:
    """Violent crime rate per 100k from each state's latest year, keyed by abbreviation."""
    query = text("""
        SELECT s.state_abbr, sc.violent_crime, sc.population
        FROM state_crime sc
        JOIN states s ON sc.state_fips = s.state_fips
        JOIN (
            SELECT state_fips, MAX(year) AS year
            FROM state_crime
            GROUP BY state_fips
        ) latest
          ON sc.state_fips = latest.state_fips AND sc.year = latest.year
    """)
    with engine.connect() as conn:
        rows = conn.execute(query).fetchall()
    return {str(r[0]): rate_per_100k(r[1], r[2]) for r in rows}
