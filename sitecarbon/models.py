"""
Data model (SiteRecord and friends)
===================================

Each row of the website-pollution dataset is converted into a `SiteRecord`.
Records are immutable (`frozen=True`) so that:
- filters and aggregations can never modify the loaded dataset, and
- every derived value (view, aggregate, score) is a fresh snapshot.

Missing numeric values are stored as `None`. A value of 0 is a real
measurement and is never used to mean "missing".
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional


class GreenFilter(str, Enum):
    ALL = "ALL"
    GREEN = "GREEN"
    NOT_GREEN = "NOT_GREEN"


class SiteFilterMode(str, Enum):
    ALL = "ALL"
    CUSTOM = "CUSTOM"
    NONE = "NONE"


class AggMode(str, Enum):
    WORST = "WORST"
    AVG = "AVG"


@dataclass(frozen=True)
class SiteRecord:
    """Immutable record for one website row."""
    site: str
    country: str
    category: str = "Unknown"
    green_host: bool = False
    # grams of CO2 per visit (grid electricity)
    co2_grid_grams: Optional[float] = None
    # kWh per visit
    energy_kwh: Optional[float] = None
    size_bytes: Optional[float] = None
    # percentile in [0, 1]
    cleaner_than: Optional[float] = None
    # grams of CO2 per visit if the host ran on renewable energy
    co2_renewable_grams: Optional[float] = None


@dataclass(frozen=True)
class FilterState:
    """Greenness filter AND site-selection filter.

    `selected_sites` is only consulted in CUSTOM mode.
    """
    green: GreenFilter = GreenFilter.ALL
    site_mode: SiteFilterMode = SiteFilterMode.ALL
    selected_sites: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class CountryAggregate:
    """Per-country summary of one metric.

    In WORST mode `value` is the worst record's value; in AVG mode it is the
    mean over usable records and `worst`/`worst_value` are kept for context.
    """
    key: str
    kind: AggMode
    value: float
    n_sites: int
    worst: SiteRecord
    worst_value: float


@dataclass(frozen=True)
class GlobalKpis:
    sites: int
    countries: int
    categories: int
    green_pct: int
    mean_co2: float
