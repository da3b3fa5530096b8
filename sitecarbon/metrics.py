"""
Metric accessors shared by the map, bar and donut views.

Each accessor returns a float or None. `size_mb` is derived from the page
weight in bytes (1 MB = 1024 * 1024 bytes).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .models import SiteRecord

MIB = 1024 * 1024


def to_mb(size_bytes: Optional[float]) -> Optional[float]:
    if size_bytes is None:
        return None
    return size_bytes / MIB


@dataclass(frozen=True)
class Metric:
    key: str
    label: str
    get: Callable[[SiteRecord], Optional[float]]
    digits: int = 3

    def fmt(self, v: Optional[float]) -> str:
        return "-" if v is None else f"{v:.{self.digits}f}"


METRICS: Dict[str, Metric] = {
    "co2_grid_grams": Metric("co2_grid_grams", "CO2 (g) / visit", lambda r: r.co2_grid_grams, 4),
    "energy_kwh": Metric("energy_kwh", "Energy (kWh) / visit", lambda r: r.energy_kwh, 5),
    "size_mb": Metric("size_mb", "Page weight (MB)", lambda r: to_mb(r.size_bytes), 2),
}

# short names accepted from the CLI and from older column spellings
_ALIASES = {
    "co2": "co2_grid_grams",
    "energy": "energy_kwh",
    "energy_kWh": "energy_kwh",
    "size": "size_mb",
    "size_bytes": "size_mb",
    "weight": "size_mb",
}


def get_metric(key: str) -> Metric:
    k = key.strip()
    k = _ALIASES.get(k, _ALIASES.get(k.lower(), k.lower()))
    if k not in METRICS:
        raise ValueError(f"metric must be one of: {', '.join(METRICS)}")
    return METRICS[k]
