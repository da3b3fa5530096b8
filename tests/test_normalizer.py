import math

from sitecarbon.normalizer import (
    FIELD_RULES, RULES_BY_NAME, normalize_row, resolve, row_issues, to_bool, to_number,
)


def test_every_rule_has_aliases():
    for rule in FIELD_RULES:
        assert rule.aliases, rule.name
    assert RULES_BY_NAME["size_bytes"].aliases[0] == "taille(octets)"


def test_to_number_keeps_zero_and_rejects_garbage():
    assert to_number("0") == 0.0
    assert to_number(0) == 0.0
    assert to_number(" 12.5 ") == 12.5
    assert to_number("1e3") == 1000.0
    for bad in (None, "", "   ", "x", "nan", "inf", "-Infinity", "1_000", float("nan"), [1]):
        assert to_number(bad) is None, bad


def test_to_bool():
    assert to_bool("1") is True
    assert to_bool("2.5") is True
    assert to_bool(-1) is True
    assert to_bool(True) is True
    assert to_bool("TRUE") is True
    assert to_bool("yes") is True
    for falsy in ("0", 0, 0.0, "", None, "abc", "false", "no", False, float("nan")):
        assert to_bool(falsy) is False, falsy


def test_missing_fields_become_none_not_zero():
    rec = normalize_row({"site": "a.com", "country": "France"})
    assert rec.category == "Unknown"
    assert rec.green_host is False
    for name in ("co2_grid_grams", "energy_kwh", "size_bytes", "cleaner_than", "co2_renewable_grams"):
        assert getattr(rec, name) is None, name


def test_text_aliases_take_first_non_empty():
    rec = normalize_row({"site": "", "url": "https://x.com", "pays": " Italy ", "categorie": "Blog"})
    assert rec.site == "https://x.com"
    assert rec.country == "Italy"
    assert rec.category == "Blog"


def test_empty_category_defaults_to_unknown():
    assert normalize_row({"site": "a", "country": "b", "category": "  "}).category == "Unknown"


def test_numeric_aliases_take_first_present_key():
    row = {"size_bytes": "7", "bytes": "5", "co2": "3", "co2_grid_grams": ""}
    rec = normalize_row(row)
    assert rec.size_bytes == 7.0
    # the first present alias wins even when its cell is empty
    assert rec.co2_grid_grams is None
    assert resolve(row, RULES_BY_NAME["size_bytes"]) == "7"


def test_french_size_header_wins():
    rec = normalize_row({"taille(octets)": "100", "taille_octets": "200", "bytes": "300"})
    assert rec.size_bytes == 100.0


def test_green_host_aliases():
    assert normalize_row({"host_green": "1"}).green_host is True
    assert normalize_row({"green": "0", "host_green": "1"}).green_host is False


def test_energy_and_renewable_aliases():
    rec = normalize_row({"energy": "0.25", "co2_renewable": "0.1", "cleaner_than": "0.7"})
    assert rec.energy_kwh == 0.25
    assert rec.co2_renewable_grams == 0.1
    assert math.isclose(rec.cleaner_than, 0.7)


def test_row_issues_only_reports_malformed_cells():
    row = {"site": "a", "country": "b", "co2_grid_grams": "x", "energy_kWh": "", "bytes": "12"}
    assert row_issues(row) == ["co2_grid_grams"]


def test_normalize_is_pure():
    row = {"site": "a", "country": "b", "co2": "1"}
    before = dict(row)
    assert normalize_row(row) == normalize_row(row)
    assert row == before
