"""
Per-dimension raw-metric extraction.

Turns each source's key-indexed values into DimensionValues keyed by entity
slug. Every entity gets a DimensionValue for every dimension; dimensions a
level has no source for (crime, schools, childcare, enviro for metros) are
all missing.
"""

import logging
from operator import attrgetter
from typing import Callable, Dict, Mapping, Optional, Sequence, TypeVar

from plaincompare.core.data_sources import DataSources
from plaincompare.core.entities import DimensionValue, MetroEntity, StateEntity
from plaincompare.ml.life_score_metadata import DIMENSION_KEYS
from plaincompare.sources import childcare, cost, crime, enviro, rent, schools, wages

logger = logging.getLogger(__name__)

E = TypeVar("E", MetroEntity, StateEntity)

DimensionValues = Dict[str, Dict[str, DimensionValue]]


def _attach(
    dimension: str,
    entities: Sequence[E],
    key_of: Callable[[E], Optional[str]],
    table: Mapping[str, Optional[float]],
) -> Dict[str, DimensionValue]:
    values: Dict[str, DimensionValue] = {}
    for e in entities:
        key = key_of(e)
        raw = table.get(key) if key is not None else None
        values[e.slug] = DimensionValue(slug=e.slug, dimension=dimension, value=raw)
    present = sum(1 for v in values.values() if v.is_present)
    logger.info(f"  {dimension}: {present} / {len(entities)} present")
    return values


def _all_missing(dimension: str, entities: Sequence[E]) -> Dict[str, DimensionValue]:
    return {e.slug: DimensionValue.missing(e.slug, dimension) for e in entities}


def extract_metro_values(sources: DataSources, metros: Sequence[MetroEntity]) -> DimensionValues:
    """Cost and rent by CBSA, wages by padded wage area; everything else missing."""
    logger.info(f"Extracting metro dimensions for {len(metros)} metros")
    by_cbsa = attrgetter("cbsa")

    extracted: DimensionValues = {
        "cost": _attach("cost", metros, by_cbsa, cost.fetch_metro_rpp(sources.engine("cost"))),
        "rent": _attach("rent", metros, by_cbsa, rent.fetch_metro_rent(sources.engine("rent"))),
        "wages": _attach(
            "wages", metros, attrgetter("wage_area"),
            wages.fetch_metro_median_wages(sources.engine("wage")),
        ),
    }
    for dimension in DIMENSION_KEYS:
        if dimension not in extracted:
            extracted[dimension] = _all_missing(dimension, metros)
    return extracted


def extract_state_values(sources: DataSources, states: Sequence[StateEntity]) -> DimensionValues:
    """All seven dimensions, keyed by abbreviation except wages (state wage area)."""
    logger.info(f"Extracting state dimensions for {len(states)} states")
    by_abbr = attrgetter("abbr")

    return {
        "cost": _attach("cost", states, by_abbr, cost.fetch_state_rpp(sources.engine("cost"))),
        "wages": _attach(
            "wages", states, attrgetter("wage_area"),
            wages.fetch_state_median_wages(sources.engine("wage")),
        ),
        "rent": _attach("rent", states, by_abbr, rent.fetch_state_rent(sources.engine("rent"))),
        "crime": _attach(
            "crime", states, by_abbr, crime.fetch_state_violent_rate(sources.engine("crime"))
        ),
        "schools": _attach(
            "schools", states, by_abbr,
            schools.fetch_state_teacher_density(sources.engine("schools")),
        ),
        "childcare": _attach(
            "childcare", states, by_abbr,
            childcare.fetch_state_infant_price(sources.engine("childcare")),
        ),
        "enviro": _attach(
            "enviro", states, by_abbr, enviro.fetch_state_compliance(sources.engine("enviro"))
        ),
    }
