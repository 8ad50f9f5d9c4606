from __future__ import annotations

import json
from pathlib import Path

from fastapi.testclient import TestClient

import app as service


def test_welcome(client: TestClient):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json() == {"message": "Welcome to Geo Hash service"}


def test_load_dummy_mumbai_then_find_nearby(client: TestClient):
    res = client.get("/load-dummy?city=1")
    assert res.status_code == 200
    data = res.json()
    assert data["lat"] == 19.07609
    assert len(data["placeData"]) == 10
    assert client.get("/healthz").json() == {"ok": True, "locations": 10}

    res = client.get("/find-nearby", params={"lat": data["lat"], "lon": data["lon"], "radius": 10})
    assert res.status_code == 200
    places = res.json()
    names = [p["name"] for p in places]
    assert "Juhu Beach" in names
    assert "Gateway of India" not in names
    distances = [p["distance"] for p in places]
    assert distances == sorted(distances)
    assert all(d <= 10 for d in distances)


def test_load_dummy_is_replace_all(client: TestClient):
    client.get("/load-dummy?city=1")
    client.get("/load-dummy?city=2")
    res = client.get("/find-nearby", params={"lat": 19.07609, "lon": 72.877426, "radius": 50})
    assert res.json() == []
    res = client.get("/find-nearby", params={"lat": 40.712776, "lon": -74.005974, "radius": 2})
    assert [p["name"] for p in res.json()] == ["One World Trade Center", "Brooklyn Bridge"]


def test_load_dummy_missing_city(client: TestClient):
    res = client.get("/load-dummy")
    assert res.status_code == 400
    assert res.json()["detail"] == "City code doesn't exists in query, Please provide city code"


def test_load_dummy_invalid_city(client: TestClient):
    res = client.get("/load-dummy?city=3")
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid city code"


def test_load_dummy_unreadable_and_broken_files(tmp_path: Path):
    client = TestClient(service.create_app(data_dir=tmp_path))
    res = client.get("/load-dummy?city=1")
    assert res.status_code == 500
    assert res.json()["detail"] == "Error reading file"

    (tmp_path / "ny.json").write_text("{not json", encoding="utf-8")
    res = client.get("/load-dummy?city=2")
    assert res.status_code == 500
    assert res.json()["detail"] == "Error parsing JSON"

    (tmp_path / "mumbai.json").write_bytes(
        b'{"lat": 0, "lon": 0, "placeData": [{"name": "\xff\xfe", "latitude": 0, "longitude": 0}]}'
    )
    res = client.get("/load-dummy?city=1")
    assert res.status_code == 500
    assert res.json()["detail"] == "Error parsing JSON"


def test_load_dummy_bad_coordinate_in_fixture(tmp_path: Path):
    (tmp_path / "mumbai.json").write_text(
        json.dumps({"lat": 0, "lon": 0, "placeData": [{"name": "x", "latitude": 100, "longitude": 0}]}),
        encoding="utf-8",
    )
    client = TestClient(service.create_app(data_dir=tmp_path))
    res = client.get("/load-dummy?city=1")
    assert res.status_code == 400
    assert "out of range" in res.json()["detail"]


def test_find_nearby_validation(client: TestClient):
    assert client.get("/find-nearby", params={"lat": 19.0, "lon": 72.0}).status_code == 422
    assert client.get("/find-nearby", params={"lat": 19.0, "lon": 72.0, "radius": 0}).status_code == 422
    assert client.get("/find-nearby", params={"lat": 19.0, "lon": "abc", "radius": 5}).status_code == 422
    res = client.get("/find-nearby", params={"lat": 95.0, "lon": 72.0, "radius": 5})
    assert res.status_code == 400


def test_find_nearby_on_empty_index(client: TestClient):
    res = client.get("/find-nearby", params={"lat": 19.0, "lon": 72.0, "radius": 5})
    assert res.status_code == 200
    assert res.json() == []


def test_location_crud(client: TestClient):
    res = client.post("/locations", json={"name": "Center", "latitude": 19.0760, "longitude": 72.8777})
    assert res.status_code == 200
    gh = res.json()["geohash"]
    assert len(gh) == 15

    res = client.get(f"/locations/{gh}")
    assert res.status_code == 200
    assert res.json()["name"] == "Center"
    assert client.get(f"/locations/{gh[:5]}").status_code == 404

    assert client.delete(f"/locations/{gh}").json() == {"ok": True}
    assert client.delete(f"/locations/{gh}").status_code == 404
    assert client.get(f"/locations/{gh}").status_code == 404


def test_post_location_out_of_range(client: TestClient):
    res = client.post("/locations", json={"name": "bad", "latitude": 0, "longitude": 190})
    assert res.status_code == 400


def test_range_returns_candidates(client: TestClient):
    client.get("/load-dummy?city=1")
    res = client.get("/range", params={"sw_lat": 18.9, "sw_lon": 72.8, "ne_lat": 19.2, "ne_lon": 73.0})
    assert res.status_code == 200
    rows = res.json()
    assert len(rows) == 10
    assert all(r["geohash"].startswith("te7") for r in rows)


def test_stats(client: TestClient):
    client.get("/load-dummy?city=1")
    client.get("/find-nearby", params={"lat": 19.07609, "lon": 72.877426, "radius": 10})
    client.post("/locations", json={"name": "Center", "latitude": 19.0760, "longitude": 72.8777})

    stats = client.get("/stats").json()
    assert stats["loads"] == 1
    assert stats["queries"] == 1
    assert stats["writes"] == 1
    assert stats["locations"] == 11
    assert stats["candidates_scanned"] >= stats["results_returned"] > 0
    assert stats["trie_nodes"] > 0
    assert stats["precision"] == 15


def test_cors_header(client: TestClient):
    res = client.get("/", headers={"Origin": "http://localhost:5500"})
    assert res.headers["access-control-allow-origin"] == "*"
