"""
Public schools source (state level only).

The schools dimension is teachers per 100 students, derived from the mean
student-teacher ratio so that a higher value is better.
"""

import logging
from typing import Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from plaincompare.sources.utils import safe_ratio

logger = logging.getLogger(__name__)

SOURCE_KEY = "schools"


def fetch_state_teacher_density(engine: Engine) -> Dict[str, Optional[float]]:
    """Teachers per 100 students keyed by state abbreviation."""
    query = text("""
        SELECT s.state_abbr, AVG(sc.student_teacher_ratio) AS avg_ratio
        FROM schools sc
        JOIN states s ON sc.state_fips = s.state_fips
        WHERE sc.student_teacher_ratio IS NOT NULL
          AND sc.student_teacher_ratio > 0
        GROUP BY s.state_abbr
    """)
    with engine.connect() as conn:
        rows = conn.execute(query).fetchall()
    return {str(r[0]): safe_ratio(100, r[1]) for r in rows}
