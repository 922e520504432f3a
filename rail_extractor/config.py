"""
Configuration settings for Railway Data Extractor
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import os

from dotenv import load_dotenv
from loguru import logger


RAILWAY_POLICIES = ("routing", "full")
STATION_POLICIES = ("major", "extended")


@dataclass
class APIConfig:
    """Overpass API endpoints and request settings"""
    # Tried in order: primary first, then mirrors
    overpass_endpoints: List[str] = field(default_factory=lambda: [
        "https://overpass-api.de/api/interpreter",
        "https://overpass.kumi.systems/api/interpreter",
    ])

    # Server-side [timeout:N] in the query header (seconds)
    query_timeout_s: int = 120

    # Hard wall-clock limit for one HTTP attempt (seconds)
    request_timeout_s: float = 200.0
    connect_timeout_s: float = 30.0

    # Request settings
    max_retries: int = 3
    retry_delay_s: float = 5.0
    rate_limit_backoff_s: float = 15.0  # multiplied by (attempt + 1) on HTTP 429

    # User agent for API requests
    user_agent: str = "RailwayDataExtractor/1.0"


@dataclass
class ExtractorConfig:
    """Extraction configuration"""
    # Output settings
    output_dir: str = "data"

    # Optional raw response cache directory (disabled when None)
    cache_dir: Optional[str] = None

    # Pause between tiles and between extraction phases (seconds)
    delay_s: float = 8.0

    # Tile size (degrees) per country size class
    tile_sizes: Dict[str, float] = field(default_factory=lambda: {
        "small": 20.0,
        "medium": 8.0,
        "large": 6.0,
        "xlarge": 5.0,
    })

    # Railway tag values queried per policy
    railway_policy: str = "routing"
    railway_types: Dict[str, List[str]] = field(default_factory=lambda: {
        "routing": ["rail", "narrow_gauge", "light_rail", "construction", "proposed"],
        "full": [
            "rail", "narrow_gauge", "light_rail", "construction", "proposed",
            "subway", "tram", "disused", "abandoned", "preserved",
        ],
    })

    # Station selection: "major" (railway=station only) or "extended"
    stations_policy: str = "major"

    # Words meaning "station", per language. Used for the Overpass name
    # filter in extended mode and for the dedup tie-break.
    station_name_tokens: Dict[str, List[str]] = field(default_factory=lambda: {
        "en": ["station"],
        "tr": ["gar", "istasyon", "İstasyon"],
        "ru": ["вокзал", "станция"],
        "ru-Latn": ["vokzal"],
        "fa": ["ایستگاه"],
    })

    # Name resolution radii for extended stations (km)
    town_match_radius_km: float = 5.0
    building_town_radius_km: float = 10.0

    # API config
    api: APIConfig = field(default_factory=APIConfig)

    def tile_size_for(self, size_class: str) -> float:
        """Tile size in degrees for a country size class"""
        return self.tile_sizes.get(size_class, self.tile_sizes["xlarge"])

    def railway_types_for_policy(self) -> List[str]:
        return self.railway_types[self.railway_policy]

    def station_tokens(self) -> List[str]:
        """Flattened station tokens across all languages, in declaration order"""
        tokens = []
        for words in self.station_name_tokens.values():
            for word in words:
                if word not in tokens:
                    tokens.append(word)
        return tokens


# Global config instance
config = ExtractorConfig()


def get_config() -> ExtractorConfig:
    """Get global configuration"""
    return config


def load_env_overrides(cfg: ExtractorConfig, env_file: Optional[str] = None) -> ExtractorConfig:
    """
    Apply overrides from a .env file and the process environment.

    Existing environment variables take precedence over the .env file.

    Recognised variables:
        RAIL_EXTRACTOR_OVERPASS_ENDPOINTS  comma-separated endpoint URLs
        RAIL_EXTRACTOR_OUTPUT_DIR          output directory
        RAIL_EXTRACTOR_DELAY_S             delay between queries (seconds)
        RAIL_EXTRACTOR_USER_AGENT          HTTP User-Agent
    """
    if env_file:
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path, override=False)
            logger.debug(f"Loaded environment from {env_path}")
    else:
        load_dotenv(override=False)

    endpoints = os.getenv("RAIL_EXTRACTOR_OVERPASS_ENDPOINTS")
    if endpoints:
        cfg.api.overpass_endpoints = [e.strip() for e in endpoints.split(",") if e.strip()]

    output_dir = os.getenv("RAIL_EXTRACTOR_OUTPUT_DIR")
    if output_dir:
        cfg.output_dir = output_dir

    delay = os.getenv("RAIL_EXTRACTOR_DELAY_S")
    if delay:
        try:
            cfg.delay_s = float(delay)
        except ValueError:
            raise ValueError(f"RAIL_EXTRACTOR_DELAY_S must be a number, got {delay!r}")

    user_agent = os.getenv("RAIL_EXTRACTOR_USER_AGENT")
    if user_agent:
        cfg.api.user_agent = user_agent

    return cfg


def validate_config(config: ExtractorConfig) -> None:
    """
    Validate that all required configuration values are set.
    Raises ValueError if any required value is missing or invalid.
    """
    errors = []

    if not config.api.overpass_endpoints:
        errors.append("api.overpass_endpoints must contain at least one URL")
    if config.api.max_retries < 1:
        errors.append(f"api.max_retries must be at least 1, got {config.api.max_retries}")
    if config.api.request_timeout_s <= 0:
        errors.append(f"api.request_timeout_s must be positive, got {config.api.request_timeout_s}")
    if config.api.query_timeout_s <= 0:
        errors.append(f"api.query_timeout_s must be positive, got {config.api.query_timeout_s}")

    if config.delay_s < 0:
        errors.append(f"delay_s must not be negative, got {config.delay_s}")

    for size_class in ("small", "medium", "large", "xlarge"):
        size = config.tile_sizes.get(size_class)
        if size is None:
            errors.append(f"tile_sizes.{size_class} is required but not set")
        elif size <= 0:
            errors.append(f"tile_sizes.{size_class} must be positive, got {size}")

    if config.railway_policy not in RAILWAY_POLICIES:
        errors.append(f"railway_policy must be one of {RAILWAY_POLICIES}, got {config.railway_policy!r}")
    elif not config.railway_types.get(config.railway_policy):
        errors.append(f"railway_types.{config.railway_policy} is empty")

    if config.stations_policy not in STATION_POLICIES:
        errors.append(f"stations_policy must be one of {STATION_POLICIES}, got {config.stations_policy!r}")

    if not config.station_tokens():
        errors.append("station_name_tokens must define at least one token")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
