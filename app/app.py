# app.py
# FastAPI front end for the geohash trie index.
# - /load-dummy rebuilds the index from a city fixture (replace-all)
# - /find-nearby runs a radius query against the published index
# - /locations, /range for point writes and raw candidate inspection
# - /stats and /healthz

import logging
import threading
from collections import Counter
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import geohash_codec as codec
from config import CORS_ORIGINS, HOST, LOG_LEVEL, PORT, PRECISION
from errors import GeoIndexError
from fixtures import FixtureError, load_city
from models import CityFixture, Location, LocationUpsert, RangeCandidate, StoredLocation
from spatial_index import IndexHolder

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

STAT_QUERIES = "queries"
STAT_LOADS = "loads"
STAT_WRITES = "writes"
STAT_SCANNED = "candidates_scanned"
STAT_RETURNED = "results_returned"


class Stats:
    def __init__(self):
        self._c = Counter()
        self._lock = threading.Lock()

    def incr(self, key: str, by: int = 1) -> None:
        with self._lock:
            self._c[key] += by

    def snapshot(self) -> dict:
        with self._lock:
            return {k: self._c[k] for k in (STAT_QUERIES, STAT_LOADS, STAT_WRITES, STAT_SCANNED, STAT_RETURNED)}


def create_app(precision: int = PRECISION, data_dir: Optional[Path] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("GeoHash with Tries (precision=%d)", precision)
        yield

    app = FastAPI(title="GeoHash Trie Proximity Service", version="1.0.0", lifespan=lifespan)
    app.state.index = IndexHolder(precision=precision)
    app.state.stats = Stats()
    app.state.data_dir = data_dir

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GeoIndexError)
    async def geo_error_handler(request: Request, exc: GeoIndexError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/")
    async def welcome():
        return {"message": "Welcome to Geo Hash service"}

    @app.get("/healthz")
    async def healthz():
        return {"ok": True, "locations": len(app.state.index.current)}

    @app.get("/load-dummy", response_model=CityFixture)
    async def load_dummy(city: Optional[str] = Query(None)):
        if city is None:
            raise HTTPException(status_code=400,
                                detail="City code doesn't exists in query, Please provide city code")
        try:
            fixture = load_city(city, app.state.data_dir)
        except FixtureError as e:
            logger.warning("load-dummy city=%s failed: %s", city, e.detail)
            raise HTTPException(status_code=e.status_code, detail=e.detail)

        # rebuild off the event loop; readers keep the old index until the swap
        places = [p.model_dump() for p in fixture.placeData]
        idx = await run_in_threadpool(app.state.index.reload, places)
        app.state.stats.incr(STAT_LOADS)
        logger.info("loaded city=%s locations=%d trie_nodes=%d", city, len(idx), idx.trie.node_count())
        return fixture

    @app.get("/find-nearby", response_model=List[Location])
    async def find_nearby(
        lat: float = Query(...),
        lon: float = Query(...),
        radius: float = Query(..., gt=0),
    ):
        idx = app.state.index.current
        results, scanned = idx.find_nearby_with_stats(lat, lon, radius)
        results.sort(key=lambda r: r["distance"])

        stats = app.state.stats
        stats.incr(STAT_QUERIES)
        stats.incr(STAT_SCANNED, by=scanned)
        stats.incr(STAT_RETURNED, by=len(results))
        logger.debug("find-nearby lat=%s lon=%s r=%s candidates=%d hits=%d",
                     lat, lon, radius, scanned, len(results))
        return results

    @app.get("/range", response_model=List[RangeCandidate])
    async def range_query(
        sw_lat: float = Query(...),
        sw_lon: float = Query(...),
        ne_lat: float = Query(...),
        ne_lon: float = Query(...),
    ):
        idx = app.state.index.current
        out = []
        for gh in sorted(idx.range_query(sw_lat, sw_lon, ne_lat, ne_lon)):
            lat, lon = codec.decode(gh)
            out.append({"geohash": gh, "name": idx.names.get(gh), "latitude": lat, "longitude": lon})
        app.state.stats.incr(STAT_QUERIES)
        app.state.stats.incr(STAT_SCANNED, by=len(out))
        return out

    @app.post("/locations")
    async def create_location(loc: LocationUpsert):
        gh = await run_in_threadpool(app.state.index.insert, loc.model_dump())
        app.state.stats.incr(STAT_WRITES)
        logger.debug("inserted %s as %s", loc.name, gh)
        return JSONResponse({"geohash": gh, "ok": True})

    @app.get("/locations/{geohash}", response_model=StoredLocation)
    async def read_location(geohash: str):
        found = app.state.index.current.get(geohash)
        if not found:
            raise HTTPException(status_code=404, detail="Location not found")
        return found

    @app.delete("/locations/{geohash}")
    async def remove_location(geohash: str):
        if not await run_in_threadpool(app.state.index.delete, geohash):
            raise HTTPException(status_code=404, detail="Location not found")
        app.state.stats.incr(STAT_WRITES)
        return JSONResponse({"ok": True})

    @app.get("/stats")
    async def get_stats():
        idx = app.state.index.current
        out = app.state.stats.snapshot()
        out["locations"] = len(idx)
        out["trie_nodes"] = idx.trie.node_count()
        out["precision"] = idx.precision
        return out

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logger.info("Server is running on port : %d", PORT)
    uvicorn.run(app, host=HOST, port=PORT)
