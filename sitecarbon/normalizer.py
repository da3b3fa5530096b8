"""
Record normalizer (raw row -> SiteRecord)
=========================================

Dataset exports disagree on column names (French and English headers,
short and long forms). Instead of probing keys ad hoc, every logical field
has one ordered `FieldRule` in `FIELD_RULES`:

- TEXT rules take the first alias whose cell is non-empty.
- NUMBER and BOOL rules take the first alias that is present in the row,
  even if its cell turns out to be empty or unparsable.

Conversion helpers never raise: anything that is not a finite number becomes
`None`, and 0 stays 0.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple
import math
import pandas as pd

from .models import SiteRecord

TEXT = "text"
NUMBER = "number"
BOOL = "bool"

TRUE_WORDS = ("true", "yes")
FALSE_WORDS = ("false", "no")


@dataclass(frozen=True)
class FieldRule:
    name: str
    aliases: Tuple[str, ...]
    kind: str
    default: Any = None


FIELD_RULES: Tuple[FieldRule, ...] = (
    FieldRule("site", ("site", "url", "website"), TEXT, ""),
    FieldRule("country", ("country", "pays"), TEXT, ""),
    FieldRule("category", ("category", "categorie"), TEXT, "Unknown"),
    FieldRule("green_host", ("green_host", "green", "host_green"), BOOL, False),
    FieldRule("co2_grid_grams", ("co2_grid_grams", "co2_grid", "co2"), NUMBER),
    FieldRule("energy_kwh", ("energy_kWh", "energy"), NUMBER),
    FieldRule("size_bytes", ("taille(octets)", "taille_octets", "size_bytes", "bytes"), NUMBER),
    FieldRule("cleaner_than", ("cleaner_than",), NUMBER),
    FieldRule("co2_renewable_grams", ("co2_renewable_grams", "co2_renewable"), NUMBER),
)

RULES_BY_NAME: Dict[str, FieldRule] = {r.name: r for r in FIELD_RULES}


def _is_blank(x: Any) -> bool:
    if x is None:
        return True
    if isinstance(x, str):
        return not x.strip()
    try:
        return bool(pd.isna(x))
    except (TypeError, ValueError):
        return False


def _to_str(x: Any) -> str:
    if _is_blank(x): return ""
    return str(x).strip()


def to_number(x: Any) -> Optional[float]:
    """Convert a cell to a finite float, returning None if missing/invalid."""
    if _is_blank(x): return None
    if isinstance(x, bool):
        return 1.0 if x else 0.0
    if isinstance(x, str):
        s = x.strip()
        # float() accepts "1_000"; a spreadsheet cell like that is not a number
        if "_" in s:
            return None
        x = s
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) else None


def to_bool(x: Any) -> bool:
    """Numeric-like or boolean-like cell -> bool. Missing/garbage is False."""
    if isinstance(x, bool):
        return x
    if isinstance(x, str):
        w = x.strip().lower()
        if w in TRUE_WORDS: return True
        if w in FALSE_WORDS: return False
    n = to_number(x)
    return n is not None and n != 0


def resolve(row: Mapping[str, Any], rule: FieldRule) -> Any:
    """Return the raw cell selected by `rule`, or None if no alias matches."""
    for alias in rule.aliases:
        if alias not in row:
            continue
        value = row[alias]
        if rule.kind == TEXT:
            if not _is_blank(value):
                return value
        elif value is not None:
            return value
    return None


def _convert(rule: FieldRule, raw: Any) -> Any:
    if rule.kind == TEXT:
        s = _to_str(raw)
        return s if s else rule.default
    if rule.kind == BOOL:
        return to_bool(raw) if raw is not None else rule.default
    return to_number(raw)


def normalize_row(row: Mapping[str, Any]) -> SiteRecord:
    """Build a SiteRecord from one raw row (pure)."""
    values = {rule.name: _convert(rule, resolve(row, rule)) for rule in FIELD_RULES}
    return SiteRecord(**values)


def row_issues(row: Mapping[str, Any]) -> List[str]:
    """Names of numeric fields whose cell is present but not a number.

    An absent or empty cell is not an issue; both still end up as None in
    the record.
    """
    out: List[str] = []
    for rule in FIELD_RULES:
        if rule.kind != NUMBER:
            continue
        raw = resolve(row, rule)
        if not _is_blank(raw) and to_number(raw) is None:
            out.append(rule.name)
    return out
