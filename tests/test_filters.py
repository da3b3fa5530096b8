from sitecarbon.filters import apply_filters, select_all, toggle_site, with_green, with_sites
from sitecarbon.models import FilterState, GreenFilter, SiteFilterMode, SiteRecord

A = SiteRecord("a.com", "France", green_host=True)
B = SiteRecord("b.com", "France", green_host=False)
C = SiteRecord("c.com", "Spain", green_host=True)
DATA = [A, B, C]


def test_all_passes_everything_and_returns_fresh_list():
    out = apply_filters(DATA, FilterState())
    assert out == DATA
    assert out is not DATA


def test_green_and_not_green():
    assert apply_filters(DATA, FilterState(green=GreenFilter.GREEN)) == [A, C]
    assert apply_filters(DATA, FilterState(green=GreenFilter.NOT_GREEN)) == [B]


def test_not_green_and_custom_compose_with_and():
    state = FilterState(green=GreenFilter.NOT_GREEN, site_mode=SiteFilterMode.CUSTOM,
                        selected_sites=frozenset({"a.com", "b.com"}))
    assert apply_filters(DATA, state) == [B]


def test_none_mode_is_always_empty():
    state = FilterState(site_mode=SiteFilterMode.NONE, selected_sites=frozenset({"a.com"}))
    assert apply_filters(DATA, state) == []
    assert apply_filters(DATA * 100, state) == []


def test_filtering_is_idempotent():
    state = FilterState(green=GreenFilter.GREEN, site_mode=SiteFilterMode.CUSTOM,
                        selected_sites=frozenset({"c.com"}))
    once = apply_filters(DATA, state)
    assert apply_filters(once, state) == once


def test_dataset_untouched():
    data = list(DATA)
    apply_filters(data, FilterState(green=GreenFilter.GREEN))
    assert data == DATA


def test_with_sites_empty_collapses_to_none():
    state = with_sites(FilterState(), [])
    assert state.site_mode == SiteFilterMode.NONE
    assert with_sites(FilterState(), ["a.com"]).site_mode == SiteFilterMode.CUSTOM


def test_toggle_site_from_all_starts_with_every_site():
    sites = ["a.com", "b.com", "c.com"]
    state = toggle_site(FilterState(), "b.com", False, sites)
    assert state.site_mode == SiteFilterMode.CUSTOM
    assert state.selected_sites == frozenset({"a.com", "c.com"})
    assert apply_filters(DATA, state) == [A, C]


def test_unchecking_the_last_site_gives_none_and_rechecking_restores_custom():
    state = with_sites(FilterState(), ["a.com"])
    state = toggle_site(state, "a.com", False, ["a.com", "b.com"])
    assert state.site_mode == SiteFilterMode.NONE
    state = toggle_site(state, "b.com", True, ["a.com", "b.com"])
    assert state.site_mode == SiteFilterMode.CUSTOM
    assert state.selected_sites == frozenset({"b.com"})


def test_with_green_and_select_all_keep_other_filter():
    state = with_sites(FilterState(), ["a.com"])
    state = with_green(state, "GREEN")
    assert state.green == GreenFilter.GREEN
    assert state.site_mode == SiteFilterMode.CUSTOM
    state = select_all(state)
    assert state.site_mode == SiteFilterMode.ALL
    assert state.green == GreenFilter.GREEN
