from typing import List, Optional
from pydantic import BaseModel, Field


class LocationUpsert(BaseModel):
    name: str
    latitude: float
    longitude: float


class Location(LocationUpsert):
    # only meaningful on query output; fixtures leave it at 0
    distance: float = 0.0


class StoredLocation(LocationUpsert):
    geohash: str


class CityFixture(BaseModel):
    lat: float
    lon: float
    placeData: List[Location] = Field(default_factory=list)


class RangeCandidate(BaseModel):
    geohash: str
    name: Optional[str] = None
    latitude: float
    longitude: float
