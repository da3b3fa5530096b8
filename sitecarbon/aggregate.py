"""
Aggregation engine
==================

Everything here is a pure function over a list of `SiteRecord`s.

Per-country aggregation (choropleth):
- A record is *usable* for a metric only if the value is finite and >= 0.
  Records that are not usable are left out entirely (not counted, not 0).
- WORST: the record with the largest value; the first one wins ties.
- AVG: the mean over usable values, plus the WORST record for context.
- A country with no usable record does not appear in the result.

The other helpers prepare the KPI strip, the top-N bar chart, the per-country
donut, the scatter plot and the dataset preview table.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Tuple
import math
import numpy as np

from .countries import canon_country
from .models import AggMode, CountryAggregate, GlobalKpis, SiteRecord
from .metrics import to_mb

Getter = Callable[[SiteRecord], Optional[float]]


def _co2(r: SiteRecord) -> Optional[float]:
    return r.co2_grid_grams


def _finite(v: Optional[float]) -> bool:
    return v is not None and math.isfinite(v)


def is_usable(v: Optional[float]) -> bool:
    return _finite(v) and v >= 0


# ---------------- Grouped aggregation ----------------
def aggregate_by(
    records: Sequence[SiteRecord],
    key: Callable[[SiteRecord], Hashable],
    metric: Getter,
    mode: AggMode = AggMode.WORST,
) -> Dict[Hashable, CountryAggregate]:
    """Group usable records by `key` and reduce each group."""
    mode = AggMode(mode)
    groups: Dict[Hashable, List[Tuple[SiteRecord, float]]] = {}
    for r in records:
        v = metric(r)
        if not is_usable(v):
            continue
        groups.setdefault(key(r), []).append((r, v))

    out: Dict[Hashable, CountryAggregate] = {}
    for k, rows in groups.items():
        worst, worst_v = rows[0]
        for r, v in rows[1:]:
            if v > worst_v:
                worst, worst_v = r, v
        value = worst_v if mode == AggMode.WORST else sum(v for _, v in rows) / len(rows)
        out[k] = CountryAggregate(key=k, kind=mode, value=value, n_sites=len(rows),
                                  worst=worst, worst_value=worst_v)
    return out


def aggregate_by_country(
    records: Sequence[SiteRecord],
    metric: Getter = _co2,
    mode: AggMode = AggMode.WORST,
) -> Dict[str, CountryAggregate]:
    """`aggregate_by` keyed on the canonical country name."""
    return aggregate_by(records, lambda r: canon_country(r.country), metric, mode)


def most_polluting_country(records: Sequence[SiteRecord], metric: Getter = _co2) -> Optional[Tuple[str, float]]:
    """Country with the highest mean value, or None if nothing is usable."""
    best: Optional[Tuple[str, float]] = None
    for k, agg in aggregate_by_country(records, metric, AggMode.AVG).items():
        if best is None or agg.value > best[1]:
            best = (k, agg.value)
    return best


# ---------------- KPIs ----------------
def mean_co2(records: Sequence[SiteRecord]) -> float:
    vals = [r.co2_grid_grams for r in records if _finite(r.co2_grid_grams)]
    if not vals:
        return 0.0
    return sum(vals) / len(vals)


def global_kpis(records: Sequence[SiteRecord]) -> GlobalKpis:
    """Distinct counts, green hosting share (rounded %), mean CO2."""
    total = len(records)
    green = sum(1 for r in records if r.green_host is True)
    # half up, not banker's rounding
    green_pct = int(math.floor(green * 100 / total + 0.5)) if total else 0
    return GlobalKpis(
        sites=len({r.site for r in records}),
        countries=len({r.country for r in records}),
        categories=len({r.category for r in records}),
        green_pct=green_pct,
        mean_co2=mean_co2(records),
    )


# ---------------- Bar chart ----------------
def top_sites(records: Sequence[SiteRecord], metric: Getter = _co2, n: int = 15) -> List[Tuple[SiteRecord, float]]:
    """The `n` records with the largest finite value, largest first."""
    rows = [(r, metric(r)) for r in records]
    rows = [(r, v) for r, v in rows if r.site and _finite(v)]
    rows.sort(key=lambda rv: rv[1], reverse=True)
    return rows[:n]


# ---------------- Donut ----------------
OTHERS = "Others"


@dataclass(frozen=True)
class DonutSlice:
    site: str
    value: float
    is_other: bool = False


def country_breakdown(
    records: Sequence[SiteRecord],
    country: str,
    metric: Getter = _co2,
    max_slices: int = 25,
) -> List[DonutSlice]:
    """Slices for one country, largest first; the tail is summed into "Others"."""
    rows = [(r.site, metric(r)) for r in records if r.country == country]
    rows = [(s, v) for s, v in rows if is_usable(v)]
    rows.sort(key=lambda sv: sv[1], reverse=True)

    slices = [DonutSlice(s, v) for s, v in rows[:max_slices]]
    rest = rows[max_slices:]
    if rest:
        slices.append(DonutSlice(OTHERS, sum(v for _, v in rest), is_other=True))
    return slices


def country_names(records: Sequence[SiteRecord]) -> List[str]:
    """Distinct raw country names, sorted."""
    return sorted({r.country for r in records if r.country})


# ---------------- Scatter ----------------
@dataclass(frozen=True)
class ScatterPoint:
    record: SiteRecord
    size_mb: float
    co2: float
    energy: float
    outlier: bool


@dataclass(frozen=True)
class ScatterSeries:
    """Points for size (x, log scale) vs CO2 (y), radius from energy.

    `threshold` is the CO2 quantile above which points are outliers.
    """
    points: List[ScatterPoint]
    categories: List[str]
    threshold: Optional[float]
    x_extent: Optional[Tuple[float, float]]
    y_max: Optional[float]
    energy_extent: Optional[Tuple[float, float]]

    @property
    def green(self) -> List[ScatterPoint]:
        return [p for p in self.points if p.record.green_host]

    @property
    def not_green(self) -> List[ScatterPoint]:
        return [p for p in self.points if not p.record.green_host]

    def by_category(self, category: str) -> List[ScatterPoint]:
        return [p for p in self.points if p.record.category == category]


def scatter_series(records: Sequence[SiteRecord], country: str = "ALL", quantile: float = 0.9) -> ScatterSeries:
    if country != "ALL":
        records = [r for r in records if r.country == country]
    clean = [
        r for r in records
        if _finite(r.size_bytes) and r.size_bytes > 0
        and _finite(r.co2_grid_grams) and _finite(r.energy_kwh)
    ]
    if not clean:
        return ScatterSeries(points=[], categories=[], threshold=None,
                             x_extent=None, y_max=None, energy_extent=None)

    co2 = np.sort(np.array([r.co2_grid_grams for r in clean], dtype=float))
    threshold = float(np.quantile(co2, quantile))

    categories: List[str] = []
    for r in clean:
        if r.category not in categories:
            categories.append(r.category)

    points = [
        ScatterPoint(record=r, size_mb=to_mb(r.size_bytes), co2=r.co2_grid_grams,
                     energy=r.energy_kwh, outlier=r.co2_grid_grams >= threshold)
        for r in clean
    ]
    sizes = [p.size_mb for p in points]
    energies = [p.energy for p in points]
    return ScatterSeries(
        points=points,
        categories=categories,
        threshold=threshold,
        x_extent=(min(sizes), max(sizes)),
        y_max=float(co2[-1]),
        energy_extent=(min(energies), max(energies)),
    )


# ---------------- Preview ----------------
def preview(records: Sequence[SiteRecord], per_country: int = 2, limit: int = 12,
            seed: Optional[int] = None) -> List[SiteRecord]:
    """A few random sites per country, for a quick look at the data."""
    by_country: Dict[str, List[SiteRecord]] = {}
    for r in records:
        by_country.setdefault(r.country, []).append(r)

    rng = np.random.default_rng(seed)
    out: List[SiteRecord] = []
    for group in by_country.values():
        order = rng.permutation(len(group))
        out.extend(group[i] for i in order[:per_country])
        if len(out) >= limit:
            break
    return out[:limit]
