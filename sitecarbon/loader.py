"""
Dataset loader (CSV/Excel -> SiteRecord list)
=============================================

This module reads the website-pollution table and converts each row into a
`SiteRecord` through the normalizer.

Key ideas:
- Cells are read as plain strings so the normalizer decides what "missing" is
  (pandas would otherwise turn "" into NaN and "0" into an int).
- Rows without a site or a country are dropped; the order of kept rows is the
  order of the file.
- Any read failure raises `LoadError`. A partial dataset is never returned.

The GeoJSON world reference used by the choropleth join is loaded here too.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Union
import json
import logging
import zipfile
import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from .models import SiteRecord
from .normalizer import normalize_row, row_issues

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

EXCEL_SUFFIXES = (".xlsx", ".xlsm")
# legacy BIFF workbooks; openpyxl cannot open them
LEGACY_EXCEL_SUFFIXES = (".xls",)

READ_ERRORS = (OSError, ValueError, KeyError, zipfile.BadZipFile, InvalidFileException)


class LoadError(RuntimeError):
    """Dataset or geographic reference could not be read."""


def _read_table(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in LEGACY_EXCEL_SUFFIXES:
        raise LoadError(f"Unsupported legacy Excel file {path}; save it as .xlsx or .csv")
    if suffix in EXCEL_SUFFIXES:
        return pd.read_excel(path, engine="openpyxl", dtype=str, keep_default_na=False)
    return pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")


def records_from_frame(df: pd.DataFrame) -> List[SiteRecord]:
    """Normalize every row of `df` and drop rows lacking site or country."""
    df = df.rename(columns={c: str(c).strip() for c in df.columns})

    records: List[SiteRecord] = []
    dropped = 0
    for i, row in enumerate(df.to_dict(orient="records")):
        rec = normalize_row(row)
        if not rec.site or not rec.country:
            dropped += 1
            continue
        issues = row_issues(row)
        if issues:
            logger.debug("row %d (%s): unparsable %s", i, rec.site, ", ".join(issues))
        records.append(rec)

    logger.info("Loaded %d records (%d dropped without site/country)", len(records), dropped)
    return records


def load_sites(path: PathLike) -> List[SiteRecord]:
    """Load the dataset at `path` (.csv, .xlsx or .xlsm).

    Raises:
        LoadError: the file is missing, unreadable or not a table.
    """
    p = Path(path)
    if not p.is_file():
        raise LoadError(f"Dataset not found: {p}")
    try:
        df = _read_table(p)
    except READ_ERRORS as e:
        raise LoadError(f"Cannot read dataset {p}: {e}") from e
    return records_from_frame(df)


def load_world_geojson(path: PathLike) -> List[Dict[str, Any]]:
    """Return the `features` list of a GeoJSON FeatureCollection."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise LoadError(f"Cannot read world reference {p}: {e}") from e
    features = data.get("features") if isinstance(data, dict) else None
    if not isinstance(features, list):
        raise LoadError(f"{p} is not a GeoJSON FeatureCollection")
    for i, f in enumerate(features):
        if not isinstance(f, dict) or not isinstance(f.get("properties") or {}, dict):
            raise LoadError(f"{p}: feature {i} is not a GeoJSON Feature")
    logger.info("Loaded %d geographic features from %s", len(features), p)
    return features
