"""
Filter engine
=============

Two orthogonal filters compose with a plain AND:

1) greenness: ALL / GREEN / NOT_GREEN
2) site selection: ALL / CUSTOM (inclusion set) / NONE

`apply_filters` always returns a fresh list and never touches the dataset.
The helpers below produce new `FilterState` values; the "current" state is
owned by the caller (see `engine.Dashboard`).
"""

from __future__ import annotations
from dataclasses import replace
from typing import Iterable, List, Sequence

from .models import FilterState, GreenFilter, SiteFilterMode, SiteRecord


def _green_ok(rec: SiteRecord, green: GreenFilter) -> bool:
    if green == GreenFilter.GREEN:
        return rec.green_host is True
    if green == GreenFilter.NOT_GREEN:
        return rec.green_host is False
    return True


def apply_filters(records: Sequence[SiteRecord], state: FilterState) -> List[SiteRecord]:
    """Return the records passing both the greenness and the site filter."""
    if state.site_mode == SiteFilterMode.NONE:
        return []
    custom = state.site_mode == SiteFilterMode.CUSTOM
    out: List[SiteRecord] = []
    for rec in records:
        if not _green_ok(rec, state.green):
            continue
        if custom and rec.site not in state.selected_sites:
            continue
        out.append(rec)
    return out


def with_green(state: FilterState, green: GreenFilter) -> FilterState:
    return replace(state, green=GreenFilter(green))


def select_all(state: FilterState) -> FilterState:
    return replace(state, site_mode=SiteFilterMode.ALL, selected_sites=frozenset())


def with_sites(state: FilterState, sites: Iterable[str]) -> FilterState:
    """Switch to an explicit inclusion set; an empty set collapses to NONE."""
    chosen = frozenset(sites)
    mode = SiteFilterMode.CUSTOM if chosen else SiteFilterMode.NONE
    return replace(state, site_mode=mode, selected_sites=chosen)


def toggle_site(state: FilterState, site: str, checked: bool, all_sites: Iterable[str]) -> FilterState:
    """Check or uncheck one site.

    From ALL mode every site counts as checked; from NONE mode none does.
    """
    if state.site_mode == SiteFilterMode.ALL:
        current = set(all_sites)
    elif state.site_mode == SiteFilterMode.NONE:
        current = set()
    else:
        current = set(state.selected_sites)

    if checked:
        current.add(site)
    else:
        current.discard(site)
    return with_sites(state, current)
