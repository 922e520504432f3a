"""
Overpass QL query builders
"""

import re
from typing import Iterable

from ...models import BoundingBox


def _alternation(values: Iterable[str]) -> str:
    return "|".join(re.escape(v) for v in values)


def _header(bbox: BoundingBox, timeout_s: int) -> str:
    return f"[out:json][timeout:{timeout_s}][bbox:{bbox.to_overpass()}];"


def railways_query(bbox: BoundingBox, railway_types: Iterable[str], timeout_s: int) -> str:
    """Railway ways of the given types inside bbox, with inline geometry"""
    return f"""{_header(bbox, timeout_s)}
way["railway"~"^({_alternation(railway_types)})$"];
out geom;"""


def major_stations_query(bbox: BoundingBox, timeout_s: int) -> str:
    """railway=station only; metro and light rail stations excluded"""
    return f"""{_header(bbox, timeout_s)}
(
  node["railway"="station"]["station"!="subway"]["station"!="light_rail"];
  way["railway"="station"];
  node["public_transport"="station"]["train"="yes"];
);
out center tags;"""


def extended_stations_query(bbox: BoundingBox, name_tokens: Iterable[str], timeout_s: int) -> str:
    """Stations, halts, stops, station buildings and nodes named like a station"""
    return f"""{_header(bbox, timeout_s)}
(
  node["railway"~"^(station|halt|stop|service_station)$"];
  way["railway"~"^(station|halt|service_station)$"];
  node["public_transport"="station"]["train"="yes"];
  way["public_transport"="station"];
  way["building"="train_station"];
  node["name"~"{_alternation(name_tokens)}",i];
);
out center tags;"""


def towns_query(bbox: BoundingBox, timeout_s: int) -> str:
    """City and town nodes, used to name unnamed stations"""
    return f"""{_header(bbox, timeout_s)}
node["place"~"^(city|town)$"];
out body;"""
