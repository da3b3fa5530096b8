"""
Dashboard controller
====================

The pure modules (filters, aggregate, scoring, countries) never keep state.
`Dashboard` is the one place that does:

1) the loaded dataset (list of immutable SiteRecord)
2) the current FilterState (replaced, never mutated)
3) the radar selection (at most `config.radar_max` sites)
4) the map settings (WORST/AVG mode and metric)
5) the world GeoJSON, loaded once and cached

Each view method recomputes its data product from scratch on every call.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from . import aggregate, filters, scoring
from .config import DashboardConfig
from .countries import GeoJoin, country_key, join_geo
from .loader import load_world_geojson
from .metrics import Metric, get_metric
from .models import AggMode, CountryAggregate, FilterState, GlobalKpis, GreenFilter, SiteRecord

# pseudo-country rows that have no place on a world map
MAP_EXCLUDED_COUNTRIES = ("GLOBAL",)


@dataclass
class Dashboard:
    """State owner for the website carbon dashboard."""
    records: List[SiteRecord]
    config: DashboardConfig = field(default_factory=DashboardConfig)
    state: FilterState = field(default_factory=FilterState)
    radar_sites: List[SiteRecord] = field(default_factory=list)
    map_mode: AggMode = AggMode.WORST
    map_metric: str = "co2_grid_grams"
    _geo: Optional[List[Mapping[str, Any]]] = field(default=None, init=False, repr=False)

    # ---------------- Filters ----------------
    def all_sites(self) -> List[str]:
        return sorted({r.site for r in self.records})

    def set_green_filter(self, green: GreenFilter) -> None:
        self.state = filters.with_green(self.state, green)

    def toggle_site(self, site: str, checked: bool) -> None:
        self.state = filters.toggle_site(self.state, site, checked, self.all_sites())

    def select_sites(self, sites: Iterable[str]) -> None:
        self.state = filters.with_sites(self.state, sites)

    def select_all_sites(self) -> None:
        self.state = filters.select_all(self.state)

    def view(self) -> List[SiteRecord]:
        """Records visible under the current filters."""
        return filters.apply_filters(self.records, self.state)

    # ---------------- Views ----------------
    def kpis(self) -> GlobalKpis:
        return aggregate.global_kpis(self.records)

    def top_sites(self, metric: str = "co2_grid_grams", n: Optional[int] = None) -> List[Tuple[SiteRecord, float]]:
        m = get_metric(metric)
        return aggregate.top_sites(self.view(), m.get, self.config.top_n if n is None else n)

    def scatter(self, country: str = "ALL") -> aggregate.ScatterSeries:
        return aggregate.scatter_series(self.view(), country, self.config.outlier_quantile)

    def donut(self, country: str, metric: str = "co2_grid_grams") -> List[aggregate.DonutSlice]:
        m = get_metric(metric)
        return aggregate.country_breakdown(self.records, country, m.get, self.config.donut_max_slices)

    # ---------------- Map ----------------
    def set_map(self, mode: Optional[str] = None, metric: Optional[str] = None) -> None:
        if mode is not None:
            self.map_mode = AggMode(mode.upper())
        if metric is not None:
            self.map_metric = get_metric(metric).key

    @property
    def metric(self) -> Metric:
        return get_metric(self.map_metric)

    def country_map(self) -> Dict[str, CountryAggregate]:
        """Per-country aggregates over the whole dataset (filters do not apply)."""
        rows = [r for r in self.records if country_key(r.country) not in MAP_EXCLUDED_COUNTRIES]
        return aggregate.aggregate_by_country(rows, self.metric.get, self.map_mode)

    def geo(self) -> List[Mapping[str, Any]]:
        if self._geo is None:
            self._geo = load_world_geojson(self.config.geo_path)
        return self._geo

    def geo_join(self) -> GeoJoin:
        return join_geo(self.geo(), self.country_map())

    # ---------------- Radar ----------------
    def radar_add(self, site: str) -> bool:
        """Add a site to the radar. False if it is full or already there."""
        if len(self.radar_sites) >= self.config.radar_max:
            return False
        if any(r.site == site for r in self.radar_sites):
            return False
        rec = next((r for r in self.records if r.site == site), None)
        if rec is None:
            raise ValueError(f"Unknown site: {site}")
        self.radar_sites.append(rec)
        return True

    def radar_remove(self, site: str) -> None:
        self.radar_sites = [r for r in self.radar_sites if r.site != site]

    def radar_clear(self) -> None:
        self.radar_sites = []

    def radar_top_durable(self) -> None:
        self.radar_sites = scoring.top_durable(self.records, self.config.radar_max)

    def radar_top_polluting(self) -> None:
        self.radar_sites = scoring.top_polluting(self.records, self.config.radar_max)

    def radar(self) -> List[scoring.RadarProfile]:
        """Profiles of the selected sites, scored against the full dataset."""
        return scoring.radar_profiles(self.radar_sites, self.records)
