import pytest

from sitecarbon.models import SiteRecord
from sitecarbon.normalizer import normalize_row


@pytest.fixture
def example_records():
    """The three-row example: two US spellings and one unparsable CO2 value."""
    rows = [
        {"site": "a.com", "country": "usa", "co2_grid_grams": 10},
        {"site": "b.com", "country": "USA", "co2_grid_grams": 5},
        {"site": "c.com", "country": "France", "co2_grid_grams": "x"},
    ]
    return [normalize_row(r) for r in rows]


@pytest.fixture
def records():
    return [
        SiteRecord("https://www.a.com", "France", "News", True, 0.8, 0.002, 3_000_000, 0.2, 0.6),
        SiteRecord("https://b.org", "France", "Shop", False, 0.4, 0.001, 1_500_000, 0.5, 0.3),
        SiteRecord("https://c.net", "Germany", "News", False, None, 0.003, 2_000_000, 0.1, None),
        SiteRecord("https://d.de", "Germany", "Blog", True, 1.2, 0.004, 4_000_000, 0.05, 1.0),
        SiteRecord("https://e.uk", "UK", "Shop", True, 0.2, None, 500_000, 0.9, 0.1),
        SiteRecord("https://global.io", "Global", "Other", False, 5.0, 0.01, 9_000_000, 0.0, 4.0),
    ]
