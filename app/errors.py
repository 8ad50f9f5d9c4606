# errors.py
# Error kinds raised by the codec, trie and spatial index.


class GeoIndexError(ValueError):
    """Base class; the HTTP layer maps it to 400."""


class InvalidCoordinate(GeoIndexError):
    def __init__(self, lat: float, lon: float):
        self.lat = lat
        self.lon = lon
        super().__init__(f"coordinate out of range: lat={lat} lon={lon}")


class InvalidGeohashCharacter(GeoIndexError):
    def __init__(self, geohash: str, char: str):
        self.geohash = geohash
        self.char = char
        super().__init__(f"invalid geohash character {char!r} in {geohash!r}")


class InvalidPrecision(GeoIndexError):
    def __init__(self, precision: int):
        self.precision = precision
        super().__init__(f"precision must be > 0, got {precision}")


class InvalidRadius(GeoIndexError):
    def __init__(self, radius_km: float):
        self.radius_km = radius_km
        super().__init__(f"radius must be > 0 km, got {radius_km}")
