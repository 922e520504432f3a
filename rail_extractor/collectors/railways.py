"""
Railway line collection

Queries railway ways tile by tile and merges them into one list of
compact segments per country.
"""

import time
from typing import List, Optional, Set
from loguru import logger

from ..config import ExtractorConfig, get_config
from ..geo import round_point
from ..models import CountrySpec, RailwaySegment
from .overpass import OverpassAPIClient, OverpassResponseParser, RawFeature, plan_tiles
from .overpass.queries import railways_query


class RailwayCollector:
    """
    Collect railway line geometry for a country

    Large countries are split into tiles (tile size by size class). A way
    crossing a tile edge is returned by every tile it touches, so features
    are deduplicated by OSM id across the whole country.
    """

    def __init__(
        self,
        api_client: Optional[OverpassAPIClient] = None,
        config: Optional[ExtractorConfig] = None
    ):
        self.config = config or get_config()
        self.api_client = api_client or OverpassAPIClient(self.config)
        self.parser = OverpassResponseParser()

    def collect(self, country: CountrySpec) -> List[RailwaySegment]:
        """
        Fetch all railway segments for a country

        Tiles that return no data are skipped; partial coverage is logged
        but does not fail the country.

        Args:
            country: Country to extract

        Returns:
            Segments in tile order, then response order within a tile
        """
        tiles = plan_tiles(country.bbox, self.config.tile_size_for(country.size))
        plural = "s" if len(tiles) > 1 else ""
        logger.info(f"🚂 Railways: {country.name} ({country.size}, {len(tiles)} tile{plural})")

        railway_types = self.config.railway_types_for_policy()
        segments: List[RailwaySegment] = []
        seen_ids: Set[int] = set()

        for i, tile in enumerate(tiles):
            if len(tiles) > 1:
                logger.info(f"  Tile {i + 1}/{len(tiles)}: [{tile.south:.1f},{tile.west:.1f},"
                            f"{tile.north:.1f},{tile.east:.1f}]")

            query = railways_query(tile, railway_types, self.config.api.query_timeout_s)
            data = self.api_client.query(query)

            if not data or "elements" not in data:
                logger.warning(f"  ⚠ No data for tile {i + 1}, skipping")
            else:
                added = self._add_features(self.parser.parse_elements(data), seen_ids, segments)
                logger.info(f"  +{added} segments ({len(segments)} total)")

            if i < len(tiles) - 1:
                time.sleep(self.config.delay_s)

        logger.info(f"  ✅ {len(segments)} railway segments")
        return segments

    def _add_features(
        self,
        features: List[RawFeature],
        seen_ids: Set[int],
        segments: List[RailwaySegment]
    ) -> int:
        """Append new, non-degenerate ways to segments; returns how many were added"""
        added = 0
        for feature in features:
            if feature.type != "way":
                continue
            if feature.id in seen_ids:
                continue
            seen_ids.add(feature.id)

            if len(feature.geometry) < 2:
                continue

            segments.append(self.to_segment(feature))
            added += 1
        return added

    @staticmethod
    def to_segment(feature: RawFeature) -> RailwaySegment:
        """Compact output record: id, railway type and rounded [lat, lon] points"""
        return RailwaySegment(
            id=feature.id,
            type=feature.tags.get("railway") or "rail",
            geometry=[list(round_point(lat, lon)) for lat, lon in feature.geometry],
        )
