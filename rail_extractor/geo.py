"""
Geographic helper functions
"""

import math
from typing import Tuple

EARTH_RADIUS_KM = 6371.0

# Output coordinate precision (~1.1 m) and station dedup precision (~11 m)
COORD_DECIMALS = 5
DEDUP_DECIMALS = 4


def haversine_km(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float
) -> float:
    """Great-circle distance between two points in kilometres"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = math.sin(delta_phi/2)**2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda/2)**2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1-a))

    return EARTH_RADIUS_KM * c


def round_coord(value: float, decimals: int = COORD_DECIMALS) -> float:
    return round(value, decimals)


def round_point(lat: float, lon: float) -> Tuple[float, float]:
    return round_coord(lat), round_coord(lon)


def dedup_key(lat: float, lon: float) -> str:
    """Bucket key for station deduplication"""
    return f"{lat:.{DEDUP_DECIMALS}f},{lon:.{DEDUP_DECIMALS}f}"
