"""
Occupational wage source.

Wage areas are keyed differently per level:
- metro areas use the CBSA code zero-padded to seven characters
- state areas are found by the state's name slug, falling back to the
  lowercase state abbreviation
"""

import logging
from typing import Dict, FrozenSet, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from plaincompare.sources.utils import to_float, to_int

logger = logging.getLogger(__name__)

SOURCE_KEY = "wage"

WAGE_AREA_CODE_WIDTH = 7


def metro_wage_area_code(cbsa: str) -> str:
    """'12420' -> '0012420'."""
    return str(cbsa).strip().zfill(WAGE_AREA_CODE_WIDTH)


def fetch_metro_area_codes(engine: Engine) -> FrozenSet[str]:
    with engine.connect() as conn:
        rows = conn.execute(
            text("SELECT area_code FROM areas WHERE area_type = 'metro'")
        ).fetchall()
    codes = frozenset(str(r[0]) for r in rows if r[0])
    logger.info(f"Wage source metro areas: {len(codes)}")
    return codes


def fetch_state_area_codes(engine: Engine) -> Dict[str, str]:
    """
    State wage area codes keyed by every name the area can be found under.

    Entries keyed by area slug win over entries keyed by state_slug.
    """
    with engine.connect() as conn:
        rows = conn.execute(
            text("SELECT area_code, slug, state_slug FROM areas WHERE area_type = 'state'")
        ).fetchall()
    by_state_slug = {str(r[2]).lower(): str(r[0]) for r in rows if r[2]}
    by_slug = {str(r[1]).lower(): str(r[0]) for r in rows if r[1]}
    return {**by_state_slug, **by_slug}


def _fetch_area_medians(engine: Engine, table: str) -> Dict[str, Optional[float]]:
    query = text(f"""
        SELECT area_code,
               SUM(tot_emp) AS total_employment,
               AVG(a_median) AS median_salary
        FROM {table}
        WHERE a_median IS NOT NULL AND a_median > 0
        GROUP BY area_code
    """)
    with engine.connect() as conn:
        rows = conn.execute(query).fetchall()

    results: Dict[str, Optional[float]] = {}
    for r in rows:
        total_employment = to_int(r[1])
        # An area with no employment total has no usable wage profile.
        results[str(r[0])] = to_float(r[2]) if total_employment else None
    return results


def fetch_metro_median_wages(engine: Engine) -> Dict[str, Optional[float]]:
    """Mean occupation median wage keyed by metro wage area code."""
    return _fetch_area_medians(engine, "metro_wages")


def fetch_state_median_wages(engine: Engine) -> Dict[str, Optional[float]]:
    """Mean occupation median wage keyed by state wage area code."""
    return _fetch_area_medians(engine, "state_wages")
