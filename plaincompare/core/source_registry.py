"""
Centralized source database registry.

Static metadata for each of the seven source databases the build reads:
what it provides, which key it is joined on, and which tables must exist
for the build to proceed.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class SourceContext:
    """Immutable metadata for a single source database."""

    key: str
    display_name: str
    description: str
    join_keys: Tuple[str, ...]
    required_tables: Tuple[str, ...]
    dimensions: List[str] = field(default_factory=list)


SOURCE_REGISTRY: Dict[str, SourceContext] = {
    "cost": SourceContext(
        key="cost",
        display_name="Cost of Living",
        description="BEA regional price parities; canonical metro and state lists",
        join_keys=("cbsa", "state_abbr"),
        required_tables=("msas", "states"),
        dimensions=["cost"],
    ),
    "rent": SourceContext(
        key="rent",
        display_name="Fair Market Rent",
        description="HUD fair market rents by metro and county",
        join_keys=("cbsa", "county_fips"),
        required_tables=("fmr_metro", "fmr_county", "counties", "states"),
        dimensions=["rent"],
    ),
    "crime": SourceContext(
        key="crime",
        display_name="Crime",
        description="FBI state crime estimates; state abbreviation to FIPS",
        join_keys=("state_abbr", "state_fips"),
        required_tables=("states", "state_crime"),
        dimensions=["crime"],
    ),
    "wage": SourceContext(
        key="wage",
        display_name="Wages",
        description="BLS OEWS wages by metro and state wage area",
        join_keys=("wage_area",),
        required_tables=("areas", "metro_wages", "state_wages"),
        dimensions=["wages"],
    ),
    "schools": SourceContext(
        key="schools",
        display_name="Schools",
        description="NCES public school directory",
        join_keys=("state_abbr", "state_fips"),
        required_tables=("states", "schools"),
        dimensions=["schools"],
    ),
    "childcare": SourceContext(
        key="childcare",
        display_name="Childcare",
        description="Childcare prices by state; canonical county list",
        join_keys=("state_abbr", "county_fips"),
        required_tables=("states", "counties"),
        dimensions=["childcare"],
    ),
    "enviro": SourceContext(
        key="enviro",
        display_name="Environment",
        description="EPA facilities, water systems and violations by state",
        join_keys=("state_abbr",),
        required_tables=("states",),
        dimensions=["enviro"],
    ),
}


def get_source(key: str) -> SourceContext:
    """Return the registry entry for a source key."""
    try:
        return SOURCE_REGISTRY[key]
    except KeyError:
        raise KeyError(f"Unknown source: {key}") from None
