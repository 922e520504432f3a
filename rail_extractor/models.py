"""
Pydantic models for Railway Data Extractor
Matches the JSON layout of the files under data/
"""

from typing import List, Optional, Dict, Literal
from pydantic import BaseModel, ConfigDict, Field, model_validator


SizeClass = Literal["small", "medium", "large", "xlarge"]


# ============================================================
# Geography
# ============================================================

class BoundingBox(BaseModel):
    """Axis-aligned box in degrees: south, west, north, east"""
    model_config = ConfigDict(frozen=True)

    south: float
    west: float
    north: float
    east: float

    @model_validator(mode="after")
    def _check_order(self) -> "BoundingBox":
        if not self.south < self.north:
            raise ValueError(f"south ({self.south}) must be less than north ({self.north})")
        if not self.west < self.east:
            raise ValueError(f"west ({self.west}) must be less than east ({self.east})")
        return self

    @classmethod
    def from_list(cls, bbox: List[float]) -> "BoundingBox":
        """Build from [south, west, north, east]"""
        south, west, north, east = bbox
        return cls(south=south, west=west, north=north, east=east)

    def as_list(self) -> List[float]:
        return [self.south, self.west, self.north, self.east]

    @property
    def lat_span(self) -> float:
        return self.north - self.south

    @property
    def lon_span(self) -> float:
        return self.east - self.west

    def to_overpass(self) -> str:
        """Overpass bbox filter text: s,w,n,e"""
        return f"{self.south},{self.west},{self.north},{self.east}"


class CountrySpec(BaseModel):
    """Static description of one country to extract"""
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    code: str
    bbox: BoundingBox
    size: SizeClass


# ============================================================
# Output Records
# ============================================================

class RailwaySegment(BaseModel):
    """One railway way, geometry as [[lat, lon], ...] rounded to 5 decimals"""
    id: int
    type: str = "rail"
    geometry: List[List[float]]

    @model_validator(mode="after")
    def _check_length(self) -> "RailwaySegment":
        if len(self.geometry) < 2:
            raise ValueError(f"railway segment {self.id} needs at least 2 points")
        return self


class Station(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    lat: float
    lon: float
    name: str = Field(min_length=1)
    name_local: Optional[str] = Field(default=None, alias="nameLocal")
    type: str = "station"


# ============================================================
# Manifest
# ============================================================

class ManifestEntry(BaseModel):
    """Per-country manifest record; error supersedes the success fields

    Fields this version does not know about are kept so merging a manifest
    written by another tool does not lose them.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: Optional[str] = None
    code: Optional[str] = None
    bbox: Optional[List[float]] = None
    railway_segments: Optional[int] = Field(default=None, alias="railwaySegments")
    stations: Optional[int] = None
    railway_file_kb: Optional[int] = Field(default=None, alias="railwayFileKB")
    station_file_kb: Optional[int] = Field(default=None, alias="stationFileKB")
    railways_extracted: Optional[str] = Field(default=None, alias="railwaysExtracted")
    stations_extracted: Optional[str] = Field(default=None, alias="stationsExtracted")
    error: Optional[str] = None

    @property
    def total_kb(self) -> int:
        return (self.railway_file_kb or 0) + (self.station_file_kb or 0)


class Manifest(BaseModel):
    generated: Optional[str] = None
    countries: Dict[str, ManifestEntry] = Field(default_factory=dict)
