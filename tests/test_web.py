from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest

from taxontree.config import Config

APP_PATH = Path(__file__).parent.parent / "web" / "app.py"


@pytest.fixture(scope="module")
def web_app():
    spec = importlib.util.spec_from_file_location("taxontree_web_app", APP_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def client(web_app, data_dir: Path):
    web_app.load_data(Config(data_dir=data_dir, threads=2))
    web_app.app.config["TESTING"] = True
    yield web_app.app.test_client()
    web_app.tree = None
    web_app.tables = None


def test_health(client) -> None:
    data = client.get("/health").get_json()
    assert data["tree_loaded"] is True
    assert data["taxids"] == 10
    assert data["names_loaded"] is True


def test_list_text(client) -> None:
    response = client.get("/api/list?ids=9606&rank=1&name=1")
    assert response.status_code == 200
    assert response.mimetype == "text/plain"
    assert response.get_data(as_text=True) == (
        "9606 [species] Homo sapiens\n"
        "  63221 [subspecies] Homo sapiens neanderthalensis\n"
        "  741158 [subspecies] Homo sapiens subsp. 'Denisova'\n"
    )


def test_list_json_skips_stale_ids(client) -> None:
    response = client.get("/api/list?ids=12345,9607&ids=9598&json=true")
    assert response.status_code == 200
    assert response.mimetype == "application/json"
    assert json.loads(response.get_data(as_text=True)) == {
        "9606": {"63221": {}, "741158": {}},
        "9598": {},
    }


def test_list_bad_ids(client) -> None:
    assert client.get("/api/list?ids=abc").status_code == 400
    assert client.get("/api/list").status_code == 400
    assert client.get("/api/list?ids=12345,777").status_code == 404


def test_list_before_load(web_app) -> None:
    web_app.tree = None
    response = web_app.app.test_client().get("/api/list?ids=9606")
    assert response.status_code == 503
