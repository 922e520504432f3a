"""
Station collection

Two policies:
- major: railway=station features with a tag-based name only. Rural halts
  and stops are left out of the static files.
- extended: also halts, stops, station buildings and nodes whose name looks
  like a station. Unnamed features are named after the nearest town.
"""

import re
import time
from dataclasses import dataclass
from typing import Dict, List, Optional
from loguru import logger

from ..config import ExtractorConfig, get_config
from ..geo import dedup_key, haversine_km, round_coord
from ..models import CountrySpec, Station
from .overpass import OverpassAPIClient, OverpassResponseParser, RawFeature
from .overpass.queries import extended_stations_query, major_stations_query, towns_query


@dataclass
class Town:
    """A named populated place used to resolve station names"""
    lat: float
    lon: float
    name: Optional[str] = None


class StationCollector:
    """Collect station points for a country over its whole bounding box"""

    NAME_TAGS = ("name:en", "name", "ref")

    def __init__(
        self,
        api_client: Optional[OverpassAPIClient] = None,
        config: Optional[ExtractorConfig] = None
    ):
        self.config = config or get_config()
        self.api_client = api_client or OverpassAPIClient(self.config)
        self.parser = OverpassResponseParser()
        self.station_pattern = re.compile(
            "|".join(re.escape(t) for t in self.config.station_tokens()),
            re.IGNORECASE
        )

    @property
    def extended(self) -> bool:
        return self.config.stations_policy == "extended"

    def collect(self, country: CountrySpec) -> List[Station]:
        """
        Fetch, name, deduplicate and sort the stations of a country

        Args:
            country: Country to extract

        Returns:
            Stations sorted case-insensitively by display name
        """
        mode = "extended" if self.extended else "major only"
        logger.info(f"🚉 Stations: {country.name} ({mode})")
        timeout_s = self.config.api.query_timeout_s

        towns: List[Town] = []
        if self.extended:
            towns = self.fetch_towns(country)
            time.sleep(self.config.delay_s)
            query = extended_stations_query(country.bbox, self.config.station_tokens(), timeout_s)
        else:
            query = major_stations_query(country.bbox, timeout_s)

        data = self.api_client.query(query)
        if not data or "elements" not in data:
            logger.warning("  ⚠ No stations")
            return []

        features = self.parser.parse_elements(data)
        logger.info(f"  Raw: {len(features)}")

        stations = self.deduplicate(features, towns)
        logger.info(f"  ✅ {len(stations)} stations")
        return stations

    def fetch_towns(self, country: CountrySpec) -> List[Town]:
        """City and town nodes in the country box; empty if the query fails"""
        data = self.api_client.query(towns_query(country.bbox, self.config.api.query_timeout_s))
        towns = []
        for feature in self.parser.parse_elements(data):
            position = feature.position()
            if position is None:
                continue
            name = feature.tags.get("name") or feature.tags.get("name:en")
            towns.append(Town(lat=position[0], lon=position[1], name=name))
        logger.info(f"  Found {len(towns)} towns")
        return towns

    def deduplicate(self, features: List[RawFeature], towns: List[Town]) -> List[Station]:
        """
        Build one station per ~11 m coordinate bucket

        On a bucket collision a candidate whose name contains a station word
        replaces one whose name does not; otherwise the first one is kept.
        """
        station_map: Dict[str, Station] = {}

        for feature in features:
            position = feature.position()
            if position is None:
                continue
            lat, lon = position

            if self.extended and feature.tags.get("building") == "train_station" and towns:
                if not self._near_any_town(lat, lon, towns, self.config.building_town_radius_km):
                    continue

            name = self.resolve_name(feature, lat, lon, towns)
            if not name:
                continue

            key = dedup_key(lat, lon)
            existing = station_map.get(key)
            if existing is not None:
                if not self.is_station_like(name) or self.is_station_like(existing.name):
                    continue

            local_name = (feature.tags.get("name") or "").strip()
            station_map[key] = Station(
                id=feature.id,
                lat=round_coord(lat),
                lon=round_coord(lon),
                name=name,
                name_local=local_name if local_name and local_name != name else None,
                type=feature.tags.get("railway") or "station",
            )

        return sorted(station_map.values(), key=lambda s: (s.name.casefold(), s.name))

    def resolve_name(
        self,
        feature: RawFeature,
        lat: float,
        lon: float,
        towns: List[Town]
    ) -> Optional[str]:
        """Tag-based name, else (extended only) '<Town> Station' for a town within range"""
        for tag in self.NAME_TAGS:
            value = (feature.tags.get(tag) or "").strip()
            if value:
                return value

        if not self.extended:
            return None

        town = self._nearest_town(lat, lon, towns, self.config.town_match_radius_km)
        if town is not None:
            return f"{town.name} Station"
        return None

    def is_station_like(self, name: str) -> bool:
        return bool(self.station_pattern.search(name))

    @staticmethod
    def _nearest_town(lat: float, lon: float, towns: List[Town], radius_km: float) -> Optional[Town]:
        closest, min_dist = None, radius_km
        for town in towns:
            if not town.name:
                continue
            dist = haversine_km(lat, lon, town.lat, town.lon)
            if dist < min_dist:
                closest, min_dist = town, dist
        return closest

    @staticmethod
    def _near_any_town(lat: float, lon: float, towns: List[Town], radius_km: float) -> bool:
        return any(haversine_km(lat, lon, t.lat, t.lon) <= radius_km for t in towns)
