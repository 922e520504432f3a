"""
Overpass API access

Components:
- API client: Overpass API communication with failover and retries
- Cache: Optional on-disk response cache
- Models: Raw element data structure (RawFeature)
- Parser: Response parsing
- Queries: Overpass QL builders
- Tiles: Bounding box tiling
"""

from .api_client import OverpassAPIClient
from .cache import OverpassCache
from .models import RawFeature
from .parser import OverpassResponseParser
from .tiles import plan_tiles

__all__ = [
    "OverpassAPIClient",
    "OverpassCache",
    "RawFeature",
    "OverpassResponseParser",
    "plan_tiles",
]
