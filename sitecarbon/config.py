"""
Configuration and logging setup.

`DashboardConfig` holds the few knobs of the dashboard; the CLI fills it from
its command-line flags.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


@dataclass
class DashboardConfig:
    data_path: str = "data/website_pollut_clean.csv"
    geo_path: str = "data/world.geojson"

    # bars in the "top polluting sites" chart
    top_n: int = 15

    # sites compared at once on the radar
    radar_max: int = 4

    # donut slices before the rest is grouped into "Others"
    donut_max_slices: int = 25

    # CO2 quantile above which a scatter point is flagged
    outlier_quantile: float = 0.9

    log_level: str = "WARNING"


def setup_logging(level: str = "WARNING") -> None:
    """
    Configure root logger. Safe to call multiple times.
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric_level)
