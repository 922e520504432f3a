"""
Data collectors for Railway Data Extractor

- RailwayCollector: Railway line geometry, tiled per country
- StationCollector: Station points with name resolution and dedup
"""

from .railways import RailwayCollector
from .stations import StationCollector, Town

__all__ = [
    "RailwayCollector",
    "StationCollector",
    "Town",
]
