"""
Static country table

Countries are grouped by size class, which selects the tile size used for
railway queries (see ExtractorConfig.tile_sizes).
"""

from typing import Dict, List, Optional

from .models import BoundingBox, CountrySpec


def _country(key: str, name: str, code: str, bbox: List[float], size: str) -> CountrySpec:
    return CountrySpec(key=key, name=name, code=code, bbox=BoundingBox.from_list(bbox), size=size)


_TABLE = [
    # Small
    _country("bulgaria", "Bulgaria", "BG", [41.24, 22.36, 44.22, 28.61], "small"),
    _country("azerbaijan", "Azerbaijan", "AZ", [38.39, 44.77, 41.91, 50.63], "small"),
    _country("turkmenistan", "Turkmenistan", "TM", [35.14, 52.50, 42.80, 66.68], "small"),
    _country("afghanistan", "Afghanistan", "AF", [29.38, 60.50, 38.49, 74.89], "small"),
    # Medium
    _country("romania", "Romania", "RO", [43.62, 20.26, 48.27, 29.69], "medium"),
    _country("uzbekistan", "Uzbekistan", "UZ", [37.18, 55.99, 45.59, 73.13], "medium"),
    _country("turkey", "Turkey", "TR", [35.81, 25.66, 42.11, 44.82], "medium"),
    # Large
    _country("iran", "Iran", "IR", [25.06, 44.05, 39.78, 63.32], "large"),
    _country("pakistan", "Pakistan", "PK", [23.69, 60.87, 37.08, 77.84], "large"),
    _country("ukraine", "Ukraine", "UA", [44.39, 22.14, 52.38, 40.23], "large"),
    _country("kazakhstan", "Kazakhstan", "KZ", [40.57, 46.49, 55.44, 87.31], "large"),
    # Extra large (capped at 100°E)
    _country("russia", "Russia", "RU", [41.19, 27.31, 70.00, 100.0], "xlarge"),
]

COUNTRIES: Dict[str, CountrySpec] = {c.key: c for c in _TABLE}


def split_known(keys: List[str], countries: Optional[Dict[str, CountrySpec]] = None):
    """Split requested keys into (known, unknown), preserving order and dropping repeats"""
    table = COUNTRIES if countries is None else countries
    known, unknown = [], []
    for key in keys:
        target = known if key in table else unknown
        if key not in target:
            target.append(key)
    return known, unknown
