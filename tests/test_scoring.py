import math

import pytest

from sitecarbon.models import SiteRecord
from sitecarbon.scoring import (
    HIGH, LOW, RADAR_METRICS, Extent, RadarMetric, compute_extents, durable_score,
    green_reduction_pct, green_saving, radar_profiles, score, top_durable, top_polluting,
)

CO2_LOW = RadarMetric("co2", "CO2", "g", LOW, lambda r: r.co2_grid_grams)
CO2_HIGH = RadarMetric("co2", "CO2", "g", HIGH, lambda r: r.co2_grid_grams)


def test_extents_defaults_and_degenerate_range():
    ext = compute_extents([SiteRecord("a", "X")], [CO2_LOW])
    assert ext["co2"] == Extent(0.0, 1.0)
    ext = compute_extents([SiteRecord("a", "X", co2_grid_grams=3.0)] * 2, [CO2_LOW])
    assert ext["co2"] == Extent(3.0, 4.0)


def test_score_polarity_and_missing():
    ext = Extent(0.0, 10.0)
    r = SiteRecord("a", "X", co2_grid_grams=2.5)
    assert score(CO2_HIGH, r, ext) == pytest.approx(0.25)
    assert score(CO2_LOW, r, ext) == pytest.approx(0.75)
    missing = SiteRecord("b", "X")
    assert score(CO2_LOW, missing, ext) == 0.0
    assert score(CO2_HIGH, missing, ext) == 0.0


def test_score_is_clamped():
    ext = Extent(1.0, 2.0)
    assert score(CO2_HIGH, SiteRecord("a", "X", co2_grid_grams=50.0), ext) == 1.0
    assert score(CO2_HIGH, SiteRecord("a", "X", co2_grid_grams=0.0), ext) == 0.0


def test_all_profile_scores_in_unit_interval(records):
    for p in radar_profiles(records, records):
        assert set(p.scores) == {m.key for m in RADAR_METRICS}
        for v in p.scores.values():
            assert 0.0 <= v <= 1.0


def test_profiles_use_base_extents(records):
    subset = [records[0], records[1]]
    (a, b) = radar_profiles(subset, records)
    # CO2 range over the whole dataset is 0.2 .. 5.0
    assert a.scores["co2_grid_grams"] == pytest.approx(1 - (0.8 - 0.2) / 4.8)
    assert b.raw["co2_grid_grams"] == 0.4


def test_profiles_fall_back_to_selection_as_base(records):
    (a, b) = radar_profiles(records[:2], [])
    assert a.scores["co2_grid_grams"] == 0.0
    assert b.scores["co2_grid_grams"] == 1.0


def test_green_saving_axes():
    r = SiteRecord("a", "X", co2_grid_grams=0.8, co2_renewable_grams=0.6)
    assert green_saving(r) == pytest.approx(0.2)
    assert green_reduction_pct(r) == pytest.approx(25.0)
    worse = SiteRecord("b", "X", co2_grid_grams=0.5, co2_renewable_grams=1.0)
    assert green_saving(worse) == 0.0
    assert green_reduction_pct(worse) == 0.0
    assert green_saving(SiteRecord("c", "X", co2_grid_grams=1.0)) is None
    assert green_reduction_pct(SiteRecord("d", "X", co2_grid_grams=0.0, co2_renewable_grams=0.0)) is None


def test_durable_score():
    r = SiteRecord("a", "X", co2_grid_grams=1.0, energy_kwh=0.002, size_bytes=1024 * 1024 * 10)
    assert durable_score(r) == pytest.approx(-(1.0 + 1.0 + 1.0))
    assert durable_score(SiteRecord("b", "X", co2_grid_grams=1.0, energy_kwh=0.1)) == -math.inf


def test_top_durable_and_polluting(records):
    best = top_durable(records, k=2)
    assert [r.site for r in best] == ["https://b.org", "https://www.a.com"]
    worst = top_polluting(records, k=3)
    # incomplete records rank as the least sustainable
    assert {r.site for r in worst[:2]} == {"https://c.net", "https://e.uk"}
    assert worst[2].site == "https://global.io"


def test_degenerate_range_at_large_magnitude():
    big = [SiteRecord("a", "X", co2_grid_grams=1e17), SiteRecord("b", "X", co2_grid_grams=1e17)]
    ext = compute_extents(big, [CO2_LOW])["co2"]
    assert ext.max > ext.min
    for p in radar_profiles(big, big, [CO2_LOW, CO2_HIGH]):
        assert 0.0 <= p.scores["co2"] <= 1.0


def test_score_with_empty_extent_does_not_divide_by_zero():
    r = SiteRecord("a", "X", co2_grid_grams=2.0)
    assert score(CO2_HIGH, r, Extent(2.0, 2.0)) == 0.0
    assert score(CO2_LOW, r, Extent(2.0, 2.0)) == 1.0
