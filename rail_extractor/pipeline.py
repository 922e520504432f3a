"""
Extraction Pipeline Orchestrator

Runs the requested extraction phases for each country in turn:

  1. Railways: tiled way queries → data/railways/{country}.json
  2. Stations: one (or two) whole-country queries → data/stations/{country}.json
  3. Manifest: per-country counts, sizes and timestamps → data/manifest.json

Countries are isolated from each other: an error in one is recorded in its
manifest entry and the run moves on to the next country.
"""

import json
import os
import time
from typing import Dict, List, Optional
from loguru import logger
from pydantic import BaseModel

from .config import ExtractorConfig, get_config
from .countries import COUNTRIES, split_known
from .collectors import RailwayCollector, StationCollector
from .collectors.overpass import OverpassAPIClient
from .manifest import ManifestStore, utc_now_iso
from .models import CountrySpec, Manifest, ManifestEntry


MODES = ("all", "railways", "stations")


class ExtractionPipeline:
    """
    Main pipeline to extract railway data for a list of countries

    Usage:
        pipeline = ExtractionPipeline()
        manifest = pipeline.run("all", ["turkey", "iran"])
    """

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        api_client: Optional[OverpassAPIClient] = None,
        countries: Optional[Dict[str, CountrySpec]] = None
    ):
        self.config = config or get_config()
        self.countries = countries if countries is not None else COUNTRIES
        self.api_client = api_client or OverpassAPIClient(self.config)

        self.railway_collector = RailwayCollector(self.api_client, self.config)
        self.station_collector = StationCollector(self.api_client, self.config)

        self.output_dir = self.config.output_dir
        self.railways_dir = os.path.join(self.output_dir, "railways")
        self.stations_dir = os.path.join(self.output_dir, "stations")
        self.manifest_store = ManifestStore(os.path.join(self.output_dir, "manifest.json"))
        self._phases_run = 0

    def run(self, mode: str = "all", country_keys: Optional[List[str]] = None) -> Manifest:
        """
        Run the requested phases for each country and persist the manifest

        Args:
            mode: "railways", "stations" or "all"
            country_keys: Countries to process (default: all configured)

        Returns:
            The saved manifest
        """
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got {mode!r}")

        if country_keys:
            keys, unknown = split_known(list(country_keys), self.countries)
            if unknown:
                logger.warning(f"⚠ Unknown countries skipped: {', '.join(unknown)}")
        else:
            keys = list(self.countries)
        names = ", ".join(self.countries[k].name for k in keys)

        logger.info("=" * 50)
        logger.info(f"Mode: {mode} | Countries: {names}")
        logger.info("=" * 50)

        os.makedirs(self.railways_dir, exist_ok=True)
        os.makedirs(self.stations_dir, exist_ok=True)

        manifest = self.manifest_store.load()
        self._phases_run = 0

        for key in keys:
            country = self.countries[key]
            entry = manifest.countries.get(key) or ManifestEntry()
            manifest.countries[key] = self.extract_country(country, mode, entry)

        self.manifest_store.save(manifest)
        self.log_summary(manifest, keys)
        return manifest

    def extract_country(self, country: CountrySpec, mode: str, entry: ManifestEntry) -> ManifestEntry:
        """Run the phases for one country, recording any failure in its entry"""
        try:
            if mode in ("all", "railways"):
                self._pause_between_phases()
                railways = self.railway_collector.collect(country)
                kb = self.write_json(os.path.join(self.railways_dir, f"{country.key}.json"), railways)
                entry.railway_segments = len(railways)
                entry.railway_file_kb = kb
                entry.railways_extracted = utc_now_iso()

            if mode in ("all", "stations"):
                self._pause_between_phases()
                stations = self.station_collector.collect(country)
                kb = self.write_json(os.path.join(self.stations_dir, f"{country.key}.json"), stations)
                entry.stations = len(stations)
                entry.station_file_kb = kb
                entry.stations_extracted = utc_now_iso()

            entry.name = country.name
            entry.code = country.code
            entry.bbox = country.bbox.as_list()
            entry.error = None

        except Exception as e:
            logger.error(f"  ❌ {country.name}: {e}")
            entry.error = str(e) or type(e).__name__
            entry.name = country.name

        return entry

    def write_json(self, path: str, records: List[BaseModel]) -> int:
        """Write records as compact JSON; returns the file size in KB"""
        payload = [r.model_dump(by_alias=True, exclude_none=True) for r in records]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, separators=(",", ":"), ensure_ascii=False)
        kb = round(os.path.getsize(path) / 1024)
        logger.info(f"  📦 {path} ({kb} KB)")
        return kb

    def log_summary(self, manifest: Manifest, keys: List[str]):
        """Log one line per requested country plus totals"""
        logger.info("=" * 50)
        logger.info("SUMMARY")
        logger.info("=" * 50)

        total_rail, total_stations, total_kb = 0, 0, 0
        for key in keys:
            entry = manifest.countries[key]
            if entry.error:
                logger.info(f"  ❌ {entry.name}: {entry.error}")
                continue
            rail = entry.railway_segments if entry.railway_segments is not None else "?"
            stations = entry.stations if entry.stations is not None else "?"
            logger.info(f"  ✅ {entry.name}: {rail} rail, {stations} stations ({entry.total_kb} KB)")
            total_rail += entry.railway_segments or 0
            total_stations += entry.stations or 0
            total_kb += entry.total_kb

        logger.info(f"  Total: {total_rail} railway segments, {total_stations} stations, {total_kb} KB")

    def _pause_between_phases(self):
        """Sleep before every phase except the first one of the run"""
        if self._phases_run > 0:
            time.sleep(self.config.delay_s)
        self._phases_run += 1
