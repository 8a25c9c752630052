"""
Environmental source (state level only).

The enviro dimension is the water-system compliance share:
num_water_systems / (num_water_systems + num_violations).
"""

import logging
from typing import Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from plaincompare.sources.utils import to_float

logger = logging.getLogger(__name__)

SOURCE_KEY = "enviro"


def compliance_share(num_water_systems, num_violations) -> Optional[float]:
    systems = to_float(num_water_systems)
    violations = to_float(num_violations)
    if systems is None or violations is None:
        return None
    total = systems + violations
    if total <= 0:
        return None
    return systems / total


def fetch_state_compliance(engine: Engine) -> Dict[str, Optional[float]]:
    """Water-system compliance share keyed by state abbreviation."""
    with engine.connect() as conn:
        rows = conn.execute(
            text("SELECT state_abbr, num_water_systems, num_violations FROM states")
        ).fetchall()
    return {str(r[0]): compliance_share(r[1], r[2]) for r in rows}
