"""
Life Score dimension definitions.

Seven dimensions feed the composite. Each has a fixed weight and a
direction; lower-is-better dimensions have their percentile inverted
before blending.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

MODEL_VERSION = "v1.0"


@dataclass(frozen=True)
class Dimension:
    key: str
    label: str
    weight: float
    lower_is_better: bool
    description: str

    @property
    def column(self) -> str:
        return f"{self.key}_score"


DIMENSIONS: Tuple[Dimension, ...] = (
    Dimension(
        key="cost",
        label="Cost of Living",
        weight=0.20,
        lower_is_better=True,
        description="Regional price parity, all items (100 = national average).",
    ),
    Dimension(
        key="wages",
        label="Wages",
        weight=0.20,
        lower_is_better=False,
        description="Mean of occupation median annual wages in the wage area.",
    ),
    Dimension(
        key="rent",
        label="Rent",
        weight=0.15,
        lower_is_better=True,
        description="Two-bedroom fair market rent, latest year.",
    ),
    Dimension(
        key="crime",
        label="Safety",
        weight=0.15,
        lower_is_better=True,
        description="Violent crimes per 100,000 residents, latest year.",
    ),
    Dimension(
        key="schools",
        label="Schools",
        weight=0.10,
        lower_is_better=False,
        description="Teachers per 100 students (inverse of student-teacher ratio).",
    ),
    Dimension(
        key="childcare",
        label="Childcare",
        weight=0.10,
        lower_is_better=True,
        description="Average center-based infant care price.",
    ),
    Dimension(
        key="enviro",
        label="Environment",
        weight=0.10,
        lower_is_better=False,
        description="Share of water systems without violations: systems / (systems + violations).",
    ),
)

DIMENSION_KEYS: Tuple[str, ...] = tuple(d.key for d in DIMENSIONS)

DIMENSION_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {d.key: d.weight for d in DIMENSIONS}
)

DIMENSION_LABELS: Mapping[str, str] = MappingProxyType(
    {d.key: d.label for d in DIMENSIONS}
)

LOWER_IS_BETTER: frozenset = frozenset(d.key for d in DIMENSIONS if d.lower_is_better)

# Evaluated top-down: the first threshold the composite reaches wins.
GRADE_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (95, "A+"),
    (90, "A"),
    (85, "A-"),
    (80, "B+"),
    (75, "B"),
    (70, "B-"),
    (65, "C+"),
    (60, "C"),
    (55, "C-"),
    (45, "D"),
)

FALLBACK_GRADE = "F"

# Composite for an entity with no dimension present at all.
NEUTRAL_COMPOSITE = 50.0

SCORED_ENTITY_TYPES: Tuple[str, ...] = ("metro", "state")
