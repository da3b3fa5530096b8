"""
Scoring / normalization (radar profile)
=======================================

The radar chart compares a handful of sites on axes with very different
units (grams, kWh, MB, %). Each axis is mapped onto [0, 1] where 1 is best:

1) extents: min/max of the finite values over a *base* set (normally the
   whole dataset, so the axes do not move when the selection changes)
2) t = (x - min) / (max - min), clamped to [0, 1]
3) "low is better" axes use 1 - t

A missing value scores 0 (worst), it is not skipped.

This module also holds the simple sustainability score used by the
"most sustainable" / "most polluting" radar presets.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence
import math

from .models import SiteRecord
from .metrics import MIB, to_mb

LOW = "low"
HIGH = "high"


@dataclass(frozen=True)
class RadarMetric:
    key: str
    label: str
    unit: str
    better: str
    get: Callable[[SiteRecord], Optional[float]]


@dataclass(frozen=True)
class Extent:
    min: float
    max: float


@dataclass(frozen=True)
class RadarProfile:
    site: str
    scores: Dict[str, float]
    raw: Dict[str, Optional[float]]


def _finite(v: Optional[float]) -> bool:
    return v is not None and math.isfinite(v)


def green_saving(r: SiteRecord) -> Optional[float]:
    """Grams saved per visit if the site moved to a green host."""
    g, ren = r.co2_grid_grams, r.co2_renewable_grams
    if not (_finite(g) and _finite(ren)):
        return None
    return max(0.0, g - ren)


def green_reduction_pct(r: SiteRecord) -> Optional[float]:
    g, ren = r.co2_grid_grams, r.co2_renewable_grams
    if not (_finite(g) and _finite(ren)) or g <= 0:
        return None
    return max(0.0, min(100.0, (1 - ren / g) * 100))


RADAR_METRICS: List[RadarMetric] = [
    RadarMetric("co2_grid_grams", "CO2 (grid)", "g", LOW, lambda r: r.co2_grid_grams),
    RadarMetric("energy_kwh", "Energy", "kWh", LOW, lambda r: r.energy_kwh),
    RadarMetric("size_mb", "Weight", "MB", LOW, lambda r: to_mb(r.size_bytes)),
    RadarMetric("green_saving_g", "Saving if green", "g", HIGH, green_saving),
    RadarMetric("green_reduction_pct", "Reduction", "%", HIGH, green_reduction_pct),
]


def compute_extents(base: Sequence[SiteRecord], metrics: Sequence[RadarMetric] = RADAR_METRICS) -> Dict[str, Extent]:
    """Per-metric min/max over `base`; 0/1 if nothing is finite, never min == max."""
    out: Dict[str, Extent] = {}
    for m in metrics:
        vals = [v for v in (m.get(r) for r in base) if _finite(v)]
        lo = min(vals) if vals else 0.0
        hi = max(vals) if vals else 1.0
        if hi <= lo:
            hi = lo + 1
        if hi <= lo:
            # lo + 1 rounds back to lo for very large magnitudes
            hi = lo + max(1.0, abs(lo) * 1e-9)
        out[m.key] = Extent(lo, hi)
    return out


def score(metric: RadarMetric, record: SiteRecord, extent: Extent) -> float:
    x = metric.get(record)
    if not _finite(x):
        return 0.0
    span = extent.max - extent.min
    t = (x - extent.min) / span if span > 0 else 0.0
    t = max(0.0, min(1.0, t))
    return 1 - t if metric.better == LOW else t


def radar_profiles(
    selected: Sequence[SiteRecord],
    base: Optional[Sequence[SiteRecord]] = None,
    metrics: Sequence[RadarMetric] = RADAR_METRICS,
) -> List[RadarProfile]:
    """One profile per selected record, scored against `base` (or `selected`)."""
    ext = compute_extents(base if base else selected, metrics)
    return [
        RadarProfile(
            site=r.site,
            scores={m.key: score(m, r, ext[m.key]) for m in metrics},
            raw={m.key: m.get(r) for m in metrics},
        )
        for r in selected
    ]


# ---------------- Presets ----------------
def durable_score(r: SiteRecord) -> float:
    """Higher is more sustainable. -inf when CO2, energy or size is missing."""
    co2, en, size = r.co2_grid_grams, r.energy_kwh, r.size_bytes
    if not all(_finite(v) for v in (co2, en, size)):
        return -math.inf
    return -(co2 * 1.0 + en * 500 + (size / MIB) * 0.1)


def top_durable(records: Sequence[SiteRecord], k: int = 4) -> List[SiteRecord]:
    return sorted(records, key=durable_score, reverse=True)[:k]


def top_polluting(records: Sequence[SiteRecord], k: int = 4) -> List[SiteRecord]:
    """Lowest sustainability score first, so incomplete records come first."""
    return sorted(records, key=durable_score)[:k]
