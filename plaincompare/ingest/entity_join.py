"""
Entity join / unification.

One canonical source per level supplies identity (slug, name, basic
attributes); the other sources only enrich it through the lookup tables.
An enrichment that cannot be found is None, never an error.
"""

import logging
from typing import Callable, Dict, Iterable, List, Tuple, TypeVar

from plaincompare.core.data_sources import DataSources
from plaincompare.core.entities import CountyEntity, EntitySet, MetroEntity, StateEntity
from plaincompare.ingest.lookups import Lookups
from plaincompare.sources import childcare, cost
from plaincompare.sources.utils import to_int

logger = logging.getLogger(__name__)

T = TypeVar("T", MetroEntity, StateEntity, CountyEntity)


def _name_order(entities: Iterable[T]) -> Tuple[T, ...]:
    return tuple(sorted(entities, key=lambda e: (e.name.lower(), e.slug)))


def _dedupe_slugs(entities: Iterable[T], level: str) -> List[T]:
    """Keep the first entity per slug; later duplicates are logged and dropped."""
    seen: Dict[str, T] = {}
    dropped = 0
    for e in entities:
        if e.slug in seen:
            dropped += 1
            continue
        seen[e.slug] = e
    if dropped:
        logger.warning(f"Dropped {dropped} duplicate {level} slugs from canonical source")
    return list(seen.values())


def _build(rows: List[Dict], make: Callable[[Dict], T], level: str) -> Tuple[T, ...]:
    entities = _name_order(make(r) for r in rows)
    return tuple(_dedupe_slugs(entities, level))


def join_metros(rows: List[Dict], lookups: Lookups) -> Tuple[MetroEntity, ...]:
    def make(r: Dict) -> MetroEntity:
        cbsa = str(r["cbsa"])
        return MetroEntity(
            slug=r["slug"],
            name=r["name"],
            cbsa=cbsa,
            state_abbr=r.get("state_abbr"),
            population=None,
            wage_area=lookups.metro_wage_area(cbsa),
        )

    metros = _build(rows, make, "metro")
    with_wages = sum(1 for m in metros if m.wage_area)
    logger.info(f"Joined {len(metros)} metros ({with_wages} with a wage area)")
    return metros


def join_states(rows: List[Dict], lookups: Lookups) -> Tuple[StateEntity, ...]:
    def make(r: Dict) -> StateEntity:
        return StateEntity(
            slug=r["slug"],
            name=r["name"],
            abbr=r["abbr"],
            fips=lookups.state_fips(r["abbr"]),
            wage_area=lookups.state_wage_area(r["slug"], r["abbr"]),
        )

    states = _build(rows, make, "state")
    with_fips = sum(1 for s in states if s.fips)
    logger.info(f"Joined {len(states)} states ({with_fips} with FIPS)")
    return states


def join_counties(rows: List[Dict], lookups: Lookups) -> Tuple[CountyEntity, ...]:
    def make(r: Dict) -> CountyEntity:
        return CountyEntity(
            slug=r["slug"],
            name=r["name"],
            state_abbr=r["state_abbr"],
            state_name=lookups.state_name(r["state_abbr"]),
            fips=str(r["fips"]),
            population=to_int(r.get("population")) or None,
        )

    counties = _build(rows, make, "county")
    logger.info(f"Joined {len(counties)} counties")
    return counties


def join_entities(sources: DataSources, lookups: Lookups) -> EntitySet:
    """Build the unified entity set for all three levels."""
    cost_engine = sources.engine("cost")
    return EntitySet(
        metros=join_metros(cost.fetch_metro_rows(cost_engine), lookups),
        states=join_states(cost.fetch_state_rows(cost_engine), lookups),
        counties=join_counties(
            childcare.fetch_county_rows(sources.engine("childcare")), lookups
        ),
    )
