"""
Popular-comparison index.

Precomputes every pair among the best-known metros and states, plus the
most populous counties, so comparison pages never need a cross join at
request time.
"""

import logging
from itertools import combinations
from typing import Dict, List, Sequence, Tuple

from plaincompare.core.entities import ComparisonPair, CountyEntity, EntitySet

logger = logging.getLogger(__name__)

# Largest metros by population, by slug.
TOP_METROS: Tuple[str, ...] = (
    "new-york-newark-jersey-city-ny-nj",
    "los-angeles-long-beach-anaheim-ca",
    "chicago-naperville-elgin-il-in",
    "dallas-fort-worth-arlington-tx",
    "houston-pasadena-the-woodlands-tx",
    "washington-arlington-alexandria-dc-va-md-wv",
    "miami-fort-lauderdale-west-palm-beach-fl",
    "philadelphia-camden-wilmington-pa-nj-de-md",
    "atlanta-sandy-springs-roswell-ga",
    "phoenix-mesa-chandler-az",
    "boston-cambridge-newton-ma-nh",
    "san-francisco-oakland-fremont-ca",
    "riverside-san-bernardino-ontario-ca",
    "detroit-warren-dearborn-mi",
    "seattle-tacoma-bellevue-wa",
    "minneapolis-st-paul-bloomington-mn-wi",
    "san-diego-chula-vista-carlsbad-ca",
    "tampa-st-petersburg-clearwater-fl",
    "denver-aurora-centennial-co",
    "st-louis-mo-il",
    "baltimore-columbia-towson-md",
    "orlando-kissimmee-sanford-fl",
    "charlotte-concord-gastonia-nc-sc",
    "san-antonio-new-braunfels-tx",
    "portland-vancouver-hillsboro-or-wa",
    "sacramento-roseville-folsom-ca",
    "pittsburgh-pa",
    "austin-round-rock-san-marcos-tx",
    "las-vegas-henderson-north-las-vegas-nv",
    "nashville-davidson-murfreesboro-franklin-tn",
    "raleigh-cary-nc",
    "salt-lake-city-murray-ut",
    "indianapolis-carmel-greenwood-in",
    "columbus-oh",
    "kansas-city-mo-ks",
)

# Most populous states, by slug.
TOP_STATES: Tuple[str, ...] = (
    "california", "texas", "florida", "new-york", "pennsylvania",
    "illinois", "ohio", "georgia", "north-carolina", "michigan",
    "new-jersey", "virginia", "washington", "arizona", "massachusetts",
    "tennessee", "indiana", "maryland", "missouri", "wisconsin",
    "colorado", "minnesota", "south-carolina", "alabama", "louisiana",
    "kentucky", "oregon", "connecticut", "utah", "nevada",
)


def filter_known(priority: Sequence[str], known_slugs: Sequence[str], level: str) -> List[str]:
    """
    Keep the priority slugs that exist after the join, in priority order.

    Unknown or renamed slugs are dropped and counted, not treated as errors.
    """
    known = set(known_slugs)
    valid = [s for s in priority if s in known]
    logger.info(f"Valid top {level} entries for comparisons: {len(valid)} / {len(priority)}")
    dropped = len(priority) - len(valid)
    if dropped:
        logger.warning(f"Dropped {dropped} unrecognized {level} slugs from the priority list")
    return valid


def top_counties_by_population(counties: Sequence[CountyEntity], limit: int) -> List[str]:
    """Slugs of the `limit` most populous counties with a known population."""
    if limit <= 0:
        return []
    ranked = sorted(
        (c for c in counties if c.population is not None),
        key=lambda c: (-c.population, c.slug),
    )
    return [c.slug for c in ranked[:limit]]


def pair_all(slugs: Sequence[str], level: str) -> List[ComparisonPair]:
    """Every unordered pair of distinct slugs, canonicalized."""
    return [
        ComparisonPair.canonical(a, b, level)
        for a, b in combinations(slugs, 2)
        if a != b
    ]


def build_popular_comparisons(
    entities: EntitySet,
    top_county_limit: int = 30,
    top_metros: Sequence[str] = TOP_METROS,
    top_states: Sequence[str] = TOP_STATES,
) -> List[ComparisonPair]:
    """
    Build the deduplicated comparison index for all levels.

    Insert-if-absent: when the same (slug_a, slug_b) is produced twice the
    first pair is kept and the repeat is counted.
    """
    candidates: List[ComparisonPair] = []

    metro_slugs = filter_known(top_metros, [m.slug for m in entities.metros], "metro")
    candidates.extend(pair_all(metro_slugs, "metro"))

    state_slugs = filter_known(top_states, [s.slug for s in entities.states], "state")
    candidates.extend(pair_all(state_slugs, "state"))

    county_slugs = top_counties_by_population(entities.counties, top_county_limit)
    logger.info(f"Top counties by population for comparisons: {len(county_slugs)}")
    candidates.extend(pair_all(county_slugs, "county"))

    pairs: Dict[Tuple[str, str], ComparisonPair] = {}
    repeats = 0
    for pair in candidates:
        if pair.key in pairs:
            repeats += 1
            continue
        pairs[pair.key] = pair

    if repeats:
        logger.info(f"Ignored {repeats} repeated comparison pairs")
    logger.info(f"Built {len(pairs)} popular comparisons")
    return list(pairs.values())
