"""
Overpass element models

Data classes for raw elements returned by the Overpass API
"""

from typing import List, Dict, Optional, Tuple
from dataclasses import dataclass, field


@dataclass
class RawFeature:
    """Represents one Overpass element (node, way or relation)"""
    id: int
    type: str
    tags: Dict[str, str] = field(default_factory=dict)
    lat: Optional[float] = None
    lon: Optional[float] = None
    geometry: List[Tuple[float, float]] = field(default_factory=list)  # (lat, lon) from 'out geom'
    center: Optional[Tuple[float, float]] = None  # (lat, lon) from 'out center'

    def position(self) -> Optional[Tuple[float, float]]:
        """Point position as (lat, lon): node coordinates, or the way center"""
        if self.type == "node":
            if self.lat is None or self.lon is None:
                return None
            return self.lat, self.lon
        return self.center
