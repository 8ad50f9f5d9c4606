# locustfile.py
import os, random, math
from locust import HttpUser, task, between, events

# ------------------- Config -------------------
CITY_CODE = os.getenv("CITY_CODE", "1")                  # 1 = Mumbai, 2 = New York
BASE_LAT = float(os.getenv("BASE_LAT", 19.07609))
BASE_LON = float(os.getenv("BASE_LON", 72.877426))
SPREAD_KM = float(os.getenv("SPREAD_KM", 15))            # query centres scatter around base
RADII_KM = [float(x) for x in os.getenv("SEARCH_RADII_KM", "2,5,10,20").split(",")]
RELOAD_WEIGHT = int(os.getenv("RELOAD_WEIGHT", 1))
WRITE_WEIGHT = int(os.getenv("WRITE_WEIGHT", 2))
SEARCH_WEIGHT = int(os.getenv("SEARCH_WEIGHT", 20))

# ------------------- Helpers -------------------
def km_to_deg_lat(km: float) -> float:
    return km / 111.0

def km_to_deg_lon(km: float, lat: float) -> float:
    return km / (111.0 * max(0.01, abs(math.cos(math.radians(lat)))))

LAT_SPAN = km_to_deg_lat(SPREAD_KM)
LON_SPAN = km_to_deg_lon(SPREAD_KM, BASE_LAT)

def random_point():
    return (BASE_LAT + random.uniform(-LAT_SPAN, LAT_SPAN),
            BASE_LON + random.uniform(-LON_SPAN, LON_SPAN))

print("[INIT] Locustfile loaded")

@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    import urllib.request
    host = environment.host or "http://localhost:8000"
    with urllib.request.urlopen(f"{host}/load-dummy?city={CITY_CODE}", timeout=5) as resp:
        print(f"[SEED] city={CITY_CODE} status={resp.status}")

# ------------------- Mixed readers + occasional writers -------------------
class ProximityUser(HttpUser):
    wait_time = between(0.05, 0.3)

    def on_start(self):
        self._inserted = []

    @task(SEARCH_WEIGHT)
    def find_nearby(self):
        lat, lon = random_point()
        with self.client.get(
            "/find-nearby",
            params={"lat": lat, "lon": lon, "radius": random.choice(RADII_KM)},
            name="GET /find-nearby",
            catch_response=True,
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Unexpected status {resp.status_code}")

    @task(WRITE_WEIGHT)
    def insert_or_delete(self):
        if self._inserted and random.random() < 0.5:
            gh = self._inserted.pop()
            # a concurrent reload may already have dropped it
            with self.client.delete(f"/locations/{gh}", name="DELETE /locations/{geohash}",
                                    catch_response=True) as resp:
                if resp.status_code not in (200, 404):
                    resp.failure(f"Unexpected status {resp.status_code}")
            return
        lat, lon = random_point()
        r = self.client.post("/locations", json={"name": "probe", "latitude": lat, "longitude": lon},
                             name="POST /locations")
        if r.status_code < 300:
            self._inserted.append(r.json()["geohash"])

    @task(RELOAD_WEIGHT)
    def reload(self):
        self.client.get(f"/load-dummy?city={CITY_CODE}", name="GET /load-dummy")

@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    import urllib.request, json
    host = environment.host or "http://localhost:8000"
    try:
        with urllib.request.urlopen(f"{host}/stats", timeout=5) as resp:
            print(f"[STATS] {json.loads(resp.read())}")
    except Exception as e:
        print(f"[STATS][ERR] {e}")
