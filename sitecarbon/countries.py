"""
Country names (canonical keys + GeoJSON join)
=============================================

The dataset writes countries as free text ("USA", "usa ", "United States").
The world GeoJSON uses its own names and ISO-3 codes. Both sides go through
`canon_country` before they are compared:

1) normalize: trim + upper-case
2) look the normalized key up in `COUNTRY_ALIASES`
3) unmapped keys pass through unchanged

`canon_country` is total and idempotent: every alias target maps to itself.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging

from .models import CountryAggregate

logger = logging.getLogger(__name__)

COUNTRY_ALIASES: Dict[str, str] = {
    "UNITED STATES": "UNITED STATES OF AMERICA",
    "USA": "UNITED STATES OF AMERICA",
    "U.S.A.": "UNITED STATES OF AMERICA",
    "UNITED STATES OF AMERICA": "UNITED STATES OF AMERICA",

    "UK": "UNITED KINGDOM",
    "U.K.": "UNITED KINGDOM",
    "GREAT BRITAIN": "UNITED KINGDOM",
    "ENGLAND": "UNITED KINGDOM",
    "UNITED KINGDOM": "UNITED KINGDOM",

    "RUSSIA": "RUSSIAN FEDERATION",
    "RUSSIAN FEDERATION": "RUSSIAN FEDERATION",

    "SOUTH KOREA": "KOREA, REPUBLIC OF",
    "KOREA, SOUTH": "KOREA, REPUBLIC OF",
    "KOREA, REPUBLIC OF": "KOREA, REPUBLIC OF",
    "NORTH KOREA": "KOREA, DEMOCRATIC PEOPLE'S REPUBLIC OF",
    "KOREA, NORTH": "KOREA, DEMOCRATIC PEOPLE'S REPUBLIC OF",
    "KOREA, DEMOCRATIC PEOPLE'S REPUBLIC OF": "KOREA, DEMOCRATIC PEOPLE'S REPUBLIC OF",

    "IRAN": "IRAN, ISLAMIC REPUBLIC OF",
    "IRAN, ISLAMIC REPUBLIC OF": "IRAN, ISLAMIC REPUBLIC OF",
    "SYRIA": "SYRIAN ARAB REPUBLIC",
    "SYRIAN ARAB REPUBLIC": "SYRIAN ARAB REPUBLIC",

    "VIETNAM": "VIET NAM",
    "VIET NAM": "VIET NAM",
    "TANZANIA": "TANZANIA, UNITED REPUBLIC OF",
    "TANZANIA, UNITED REPUBLIC OF": "TANZANIA, UNITED REPUBLIC OF",

    "CZECHIA": "CZECH REPUBLIC",
    "CZECH REPUBLIC": "CZECH REPUBLIC",
}

# property names probed on each GeoJSON feature, in order
GEO_NAME_PROPS = ("name", "ADMIN", "NAME", "NAME_EN")
GEO_ISO3_PROPS = ("ISO_A3", "iso_a3")


def country_key(s: Any) -> str:
    if s is None:
        return ""
    return str(s).strip().upper()


def canon_country(s: Any) -> str:
    """Canonical join key for a country name or ISO code."""
    k = country_key(s)
    return COUNTRY_ALIASES.get(k, k)


def _props(feature: Mapping[str, Any]) -> Mapping[str, Any]:
    return feature.get("properties") or {}


def geo_name(feature: Mapping[str, Any]) -> str:
    props = _props(feature)
    for p in GEO_NAME_PROPS:
        if props.get(p):
            return str(props[p])
    return "Country"


def geo_iso3(feature: Mapping[str, Any]) -> str:
    props = _props(feature)
    for p in GEO_ISO3_PROPS:
        if props.get(p):
            return str(props[p])
    return ""


@dataclass(frozen=True)
class GeoJoin:
    """Result of joining country aggregates onto GeoJSON features.

    rows: (feature name, ISO-3, aggregate or None) in feature order.
    max_value: top of the colour scale; 1.0 when every aggregate is 0 or there are none.
    unmatched: aggregate keys that no feature claimed.
    """
    rows: List[Tuple[str, str, Optional[CountryAggregate]]]
    max_value: float
    unmatched: List[str]


def join_geo(features: List[Mapping[str, Any]], aggregates: Mapping[str, CountryAggregate]) -> GeoJoin:
    """Attach each feature to its aggregate by canonical name, then ISO-3."""
    rows: List[Tuple[str, str, Optional[CountryAggregate]]] = []
    used = set()
    for f in features:
        name = geo_name(f)
        iso3 = geo_iso3(f)
        hit = aggregates.get(canon_country(name))
        if hit is None and iso3:
            hit = aggregates.get(canon_country(iso3))
        if hit is not None:
            used.add(hit.key)
        rows.append((name, iso3, hit))

    values = [agg.value for agg in aggregates.values()]
    max_value = max(values) if values else 0.0
    unmatched = [k for k in aggregates if k not in used]
    if unmatched:
        logger.warning("%d countries have no map feature: %s", len(unmatched), ", ".join(sorted(unmatched)))
    return GeoJoin(rows=rows, max_value=max_value or 1.0, unmatched=unmatched)
