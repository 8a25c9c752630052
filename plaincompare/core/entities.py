"""
Immutable in-memory types passed between build phases.

Entities are created once by the join and never modified. A
DimensionValue always states explicitly whether a raw value exists, so no
consumer can mistake a missing observation for zero.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class MetroEntity:
    slug: str
    name: str
    cbsa: str
    state_abbr: Optional[str] = None
    population: Optional[int] = None
    wage_area: Optional[str] = None

    entity_type = "metro"

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StateEntity:
    slug: str
    name: str
    abbr: str
    fips: Optional[str] = None
    wage_area: Optional[str] = None

    entity_type = "state"

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CountyEntity:
    slug: str
    name: str
    state_abbr: str
    state_name: str
    fips: str
    population: Optional[int] = None

    entity_type = "county"

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


Entity = Union[MetroEntity, StateEntity, CountyEntity]


@dataclass(frozen=True)
class EntitySet:
    """Joined entities for every level, each in case-insensitive name order."""

    metros: Tuple[MetroEntity, ...] = ()
    states: Tuple[StateEntity, ...] = ()
    counties: Tuple[CountyEntity, ...] = ()

    def by_type(self, entity_type: str) -> Tuple[Entity, ...]:
        if entity_type == "metro":
            return self.metros
        if entity_type == "state":
            return self.states
        if entity_type == "county":
            return self.counties
        raise ValueError(f"Unknown entity type: {entity_type}")

    def counts(self) -> Dict[str, int]:
        return {
            "metros": len(self.metros),
            "states": len(self.states),
            "counties": len(self.counties),
        }


@dataclass(frozen=True)
class DimensionValue:
    """
    One raw observation for an entity and dimension.

    value is None when the source had no usable row; use is_missing rather
    than truthiness, since 0.0 is a legitimate observation.
    """

    slug: str
    dimension: str
    value: Optional[float] = None

    @classmethod
    def missing(cls, slug: str, dimension: str) -> "DimensionValue":
        return cls(slug=slug, dimension=dimension, value=None)

    @property
    def is_missing(self) -> bool:
        return self.value is None

    @property
    def is_present(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class ScoredEntity:
    """Output row for the life_scores table."""

    slug: str
    type: str
    name: str
    scores: Dict[str, Optional[float]]
    composite_score: float
    grade: str
    dimensions_present: List[str] = field(default_factory=list)

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "slug": self.slug,
            "type": self.type,
            "name": self.name,
        }
        for dimension, score in self.scores.items():
            record[f"{dimension}_score"] = score
        record["composite_score"] = self.composite_score
        record["grade"] = self.grade
        return record


@dataclass(frozen=True)
class ComparisonPair:
    """Canonical popular-comparison pair: slug_a < slug_b."""

    slug_a: str
    slug_b: str
    level: str

    @classmethod
    def canonical(cls, first: str, second: str, level: str) -> "ComparisonPair":
        a, b = sorted((first, second))
        return cls(slug_a=a, slug_b=b, level=level)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.slug_a, self.slug_b)

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)
