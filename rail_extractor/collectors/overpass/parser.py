"""
Overpass response parser

Parses Overpass API responses into RawFeature objects
"""

from typing import Dict, Any, List, Optional, Tuple
from loguru import logger

from .models import RawFeature


class OverpassResponseParser:
    """Parses Overpass API responses"""

    @staticmethod
    def parse_elements(data: Optional[Dict[str, Any]]) -> List[RawFeature]:
        """
        Parse Overpass response into features, preserving response order

        Handles plain nodes, 'out geom' ways and 'out center' ways.
        Elements without a usable id are skipped.

        Args:
            data: JSON response from Overpass API (None yields no features)

        Returns:
            List of RawFeature
        """
        if not data:
            return []

        features = []
        for element in data.get("elements") or []:
            if not isinstance(element, dict) or "id" not in element:
                logger.debug(f"Skipping malformed element: {element!r}")
                continue

            geometry = []
            for point in element.get("geometry") or []:
                parsed = OverpassResponseParser._parse_point(point)
                if parsed is not None:
                    geometry.append(parsed)

            features.append(RawFeature(
                id=element["id"],
                type=element.get("type", "node"),
                tags=element.get("tags") or {},
                lat=element.get("lat"),
                lon=element.get("lon"),
                geometry=geometry,
                center=OverpassResponseParser._parse_point(element.get("center")),
            ))

        return features

    @staticmethod
    def _parse_point(point: Any) -> Optional[Tuple[float, float]]:
        """Parse a {lat, lon} object into a (lat, lon) tuple"""
        if not isinstance(point, dict):
            return None
        lat = point.get("lat")
        lon = point.get("lon")
        if lat is None or lon is None:
            return None
        return lat, lon
