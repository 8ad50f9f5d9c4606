# geohash_codec.py
# Pure geohash encode/decode + Haversine distance. No state, no I/O.

import math
from typing import Tuple

from errors import InvalidCoordinate, InvalidGeohashCharacter

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
_BASE32_MAP = {c: i for i, c in enumerate(BASE32)}

MIN_LATITUDE, MAX_LATITUDE = -90.0, 90.0
MIN_LONGITUDE, MAX_LONGITUDE = -180.0, 180.0

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.0


def validate_point(lat: float, lon: float) -> None:
    # NaN fails both comparisons, so it is rejected too
    if not (MIN_LATITUDE <= lat <= MAX_LATITUDE) or not (MIN_LONGITUDE <= lon <= MAX_LONGITUDE):
        raise InvalidCoordinate(lat, lon)


def encode(lat: float, lon: float, precision: int) -> str:
    """
    Encode a point into a geohash of `precision` characters.

    Bits alternate longitude/latitude starting with longitude; each group of
    five bits selects one BASE32 symbol. precision <= 0 gives "".
    """
    validate_point(lat, lon)
    if precision <= 0:
        return ""

    lat_min, lat_max = MIN_LATITUDE, MAX_LATITUDE
    lon_min, lon_max = MIN_LONGITUDE, MAX_LONGITUDE
    geohash = []
    bits = 0

    for _ in range(precision):
        value = 0
        for _ in range(5):
            bits += 1
            if bits % 2 == 1:
                mid = (lon_min + lon_max) / 2
                if lon > mid:
                    value = (value << 1) | 1
                    lon_min = mid
                else:
                    value <<= 1
                    lon_max = mid
            else:
                mid = (lat_min + lat_max) / 2
                if lat > mid:
                    value = (value << 1) | 1
                    lat_min = mid
                else:
                    value <<= 1
                    lat_max = mid
        geohash.append(BASE32[value])

    return "".join(geohash)


def decode_bounds(geohash: str) -> Tuple[float, float, float, float]:
    """Return the cell (lat_min, lat_max, lon_min, lon_max) a geohash denotes."""
    lat_min, lat_max = MIN_LATITUDE, MAX_LATITUDE
    lon_min, lon_max = MIN_LONGITUDE, MAX_LONGITUDE
    is_lon = True

    for c in geohash:
        idx = _BASE32_MAP.get(c)
        if idx is None:
            raise InvalidGeohashCharacter(geohash, c)
        for shift in range(4, -1, -1):
            bit = (idx >> shift) & 1
            if is_lon:
                mid = (lon_min + lon_max) / 2
                if bit:
                    lon_min = mid
                else:
                    lon_max = mid
            else:
                mid = (lat_min + lat_max) / 2
                if bit:
                    lat_min = mid
                else:
                    lat_max = mid
            is_lon = not is_lon

    return lat_min, lat_max, lon_min, lon_max


def decode(geohash: str) -> Tuple[float, float]:
    """Centre of the geohash cell as (lat, lon); never the exact original point."""
    lat_min, lat_max, lon_min, lon_max = decode_bounds(geohash)
    return (lat_min + lat_max) / 2, (lon_min + lon_max) / 2


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle (Haversine) distance in km."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bounding_box(lat: float, lon: float, radius_km: float) -> Tuple[float, float, float, float]:
    """
    Flat-Earth box around a point: (min_lat, min_lon, max_lat, max_lon).

    Known precision limit: the longitude delta divides by cos(lat), so the box
    widens without bound towards the poles. Corners are clamped into range.
    """
    lat_delta = radius_km / KM_PER_DEGREE
    cos_lat = math.cos(math.radians(lat))
    lon_delta = radius_km / (KM_PER_DEGREE * cos_lat) if cos_lat > 0 else MAX_LONGITUDE - MIN_LONGITUDE

    return (
        max(MIN_LATITUDE, lat - lat_delta),
        max(MIN_LONGITUDE, lon - lon_delta),
        min(MAX_LATITUDE, lat + lat_delta),
        min(MAX_LONGITUDE, lon + lon_delta),
    )


def common_prefix(a: str, b: str) -> str:
    i = 0
    while i < len(a) and i < len(b) and a[i] == b[i]:
        i += 1
    return a[:i]
