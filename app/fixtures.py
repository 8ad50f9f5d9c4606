# fixtures.py
# City fixture files (mumbai.json / ny.json) -> CityFixture.

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from config import CITY_FILES, DATA_DIR
from models import CityFixture


class FixtureError(Exception):
    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(detail)


def fixture_path(city_code: str, data_dir: Optional[Path] = None) -> Path:
    name = CITY_FILES.get(city_code)
    if name is None:
        raise FixtureError(400, "Invalid city code")
    return Path(data_dir or DATA_DIR) / name


def load_city(city_code: str, data_dir: Optional[Path] = None) -> CityFixture:
    path = fixture_path(city_code, data_dir)
    try:
        raw = path.read_bytes()
    except OSError:
        raise FixtureError(500, "Error reading file")
    try:
        return CityFixture.model_validate(json.loads(raw))
    except (UnicodeDecodeError, json.JSONDecodeError, ValidationError):
        raise FixtureError(500, "Error parsing JSON")
