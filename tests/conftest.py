from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import app as service
from spatial_index import SpatialIndex

CENTER = (19.0760, 72.8777)
FAR = (19.2000, 73.0000)


@pytest.fixture
def index() -> SpatialIndex:
    return SpatialIndex.build(
        [
            {"name": "Center", "latitude": CENTER[0], "longitude": CENTER[1]},
            {"name": "Far", "latitude": FAR[0], "longitude": FAR[1]},
        ]
    )


@pytest.fixture
def client() -> TestClient:
    return TestClient(service.create_app())
