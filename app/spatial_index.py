# spatial_index.py
# Codec + trie: location records in, proximity/range results out.

import threading
from typing import Dict, Iterable, List, Optional, Set, Tuple

import geohash_codec as codec
from config import PRECISION
from errors import GeoIndexError, InvalidPrecision, InvalidRadius
from geo_trie import GeoHashTrie

UNKNOWN_LOCATION = "unknown location"


class SpatialIndex:
    """
    Trie of geohashes plus a geohash -> name map.

    Two points that hash to the same geohash share one entry; the last name
    written wins.
    """

    def __init__(self, precision: int = PRECISION):
        if precision <= 0:
            raise InvalidPrecision(precision)
        self.precision = precision
        self.trie = GeoHashTrie()
        self.names: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self.trie)

    def copy(self) -> "SpatialIndex":
        clone = SpatialIndex(self.precision)
        clone.trie = self.trie.copy()
        clone.names = dict(self.names)
        return clone

    @classmethod
    def build(cls, locations: Iterable[Dict], precision: int = PRECISION) -> "SpatialIndex":
        idx = cls(precision)
        idx.load(locations)
        return idx

    # ----------------- Writes -----------------

    def load(self, locations: Iterable[Dict], precision: Optional[int] = None) -> int:
        """Replace everything with `locations`. Returns the number inserted."""
        precision = self.precision if precision is None else precision
        if precision <= 0:
            raise InvalidPrecision(precision)

        # encode everything first so a bad record leaves the old state intact
        entries = [
            (codec.encode(float(loc["latitude"]), float(loc["longitude"]), precision), loc["name"])
            for loc in locations
        ]

        self.precision = precision
        self.trie = GeoHashTrie()
        self.names = {}
        for gh, name in entries:
            self.trie.insert(gh)
            self.names[gh] = name
        return len(entries)

    def insert(self, location: Dict) -> str:
        gh = codec.encode(float(location["latitude"]), float(location["longitude"]), self.precision)
        self.trie.insert(gh)
        self.names[gh] = location["name"]
        return gh

    def delete(self, geohash: str) -> bool:
        removed = self.trie.delete(geohash)
        self.names.pop(geohash, None)
        return removed

    # ----------------- Reads -----------------

    def search(self, geohash: str) -> bool:
        return self.trie.search(geohash)

    def get(self, geohash: str) -> Optional[Dict]:
        if not self.trie.search(geohash):
            return None
        lat, lon = codec.decode(geohash)
        return {
            "geohash": geohash,
            "name": self.names.get(geohash, UNKNOWN_LOCATION),
            "latitude": lat,
            "longitude": lon,
        }

    def range_query(self, sw_lat: float, sw_lon: float, ne_lat: float, ne_lon: float,
                    precision: Optional[int] = None) -> Set[str]:
        """
        Candidate geohashes for the box between the south-west and north-east
        corners. No containment filter is applied.
        """
        precision = self.precision if precision is None else precision
        if precision <= 0:
            raise InvalidPrecision(precision)
        sw = codec.encode(sw_lat, sw_lon, precision)
        ne = codec.encode(ne_lat, ne_lon, precision)
        return self.trie.collect_by_prefix_range(sw, ne)

    def find_nearby(self, lat: float, lon: float, radius_km: float) -> List[Dict]:
        """
        Locations within `radius_km` of (lat, lon), in no particular order.

        The bounding box uses a flat-Earth approximation and degrades near the
        poles; the Haversine post-filter keeps the answer exact for whatever
        candidates the box yields.
        """
        return self.find_nearby_with_stats(lat, lon, radius_km)[0]

    def find_nearby_with_stats(self, lat: float, lon: float, radius_km: float) -> Tuple[List[Dict], int]:
        """find_nearby plus the number of trie candidates scanned."""
        if not radius_km > 0:
            raise InvalidRadius(radius_km)
        codec.validate_point(lat, lon)

        min_lat, min_lon, max_lat, max_lon = codec.bounding_box(lat, lon, radius_km)
        candidates = self.range_query(min_lat, min_lon, max_lat, max_lon)

        out = []
        for gh in candidates:
            try:
                c_lat, c_lon = codec.decode(gh)
            except GeoIndexError:
                continue
            distance = codec.calculate_distance(lat, lon, c_lat, c_lon)
            if distance <= radius_km:
                out.append({
                    "name": self.names.get(gh, UNKNOWN_LOCATION),
                    "latitude": c_lat,
                    "longitude": c_lon,
                    "distance": distance,
                })
        return out, len(candidates)


class IndexHolder:
    """
    Publishes the current SpatialIndex.

    Every write (reload, insert, delete) builds a new index off to the side
    and swaps the reference, so a reader that already grabbed `current`
    keeps a consistent view and never sees a trie change under it. Writers
    are serialised by one lock. Point writes copy the whole index, O(n).
    """

    def __init__(self, index: Optional[SpatialIndex] = None, precision: int = PRECISION):
        self._index = index if index is not None else SpatialIndex(precision)
        self._lock = threading.Lock()

    @property
    def current(self) -> SpatialIndex:
        return self._index

    def reload(self, locations: Iterable[Dict], precision: Optional[int] = None) -> SpatialIndex:
        with self._lock:
            if precision is None:
                precision = self._index.precision
            fresh = SpatialIndex.build(locations, precision)
            self._index = fresh
        return fresh

    def insert(self, location: Dict) -> str:
        with self._lock:
            fresh = self._index.copy()
            gh = fresh.insert(location)
            self._index = fresh
        return gh

    def delete(self, geohash: str) -> bool:
        with self._lock:
            if not self._index.search(geohash):
                return False
            fresh = self._index.copy()
            fresh.delete(geohash)
            self._index = fresh
        return True
