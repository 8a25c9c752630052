"""
Key-translation tables built once per run.

All maps are read-only views; nothing mutates them after build_lookups()
returns.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional

from plaincompare.core.data_sources import DataSources
from plaincompare.sources import cost, crime, wages

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Lookups:
    state_fips_by_abbr: Mapping[str, str]
    state_names_by_abbr: Mapping[str, str]
    metro_wage_areas: FrozenSet[str]
    state_wage_areas: Mapping[str, str]

    def metro_wage_area(self, cbsa: str) -> Optional[str]:
        """Padded wage-area code for a CBSA, or None if the wage source lacks it."""
        code = wages.metro_wage_area_code(cbsa)
        return code if code in self.metro_wage_areas else None

    def state_wage_area(self, state_slug: str, abbr: str) -> Optional[str]:
        """Wage-area code for a state: by name slug first, then by lowercase abbreviation."""
        for key in (state_slug.lower(), abbr.lower()):
            code = self.state_wage_areas.get(key)
            if code:
                return code
        return None

    def state_fips(self, abbr: str) -> Optional[str]:
        return self.state_fips_by_abbr.get(abbr)

    def state_name(self, abbr: str) -> str:
        return self.state_names_by_abbr.get(abbr, abbr)


def _frozen(mapping: Dict[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


def build_lookups(sources: DataSources) -> Lookups:
    """Read every secondary key table once and freeze it."""
    state_rows = cost.fetch_state_rows(sources.engine("cost"))
    lookups = Lookups(
        state_fips_by_abbr=_frozen(crime.fetch_state_fips(sources.engine("crime"))),
        state_names_by_abbr=_frozen({r["abbr"]: r["name"] for r in state_rows}),
        metro_wage_areas=wages.fetch_metro_area_codes(sources.engine("wage")),
        state_wage_areas=_frozen(wages.fetch_state_area_codes(sources.engine("wage"))),
    )
    logger.info(
        f"Lookups ready: {len(lookups.state_fips_by_abbr)} state FIPS, "
        f"{len(lookups.metro_wage_areas)} metro wage areas, "
        f"{len(lookups.state_wage_areas)} state wage area keys"
    )
    return lookups
