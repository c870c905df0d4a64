from datetime import datetime, timedelta, timezone
from typing import Iterator

import pytest
from flask.testing import FlaskClient

from app import build_series, create_app, format_local
from db import ReadingStore
from errors import ReadError, StorageUnavailable

T1 = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
T2 = T1 + timedelta(minutes=20)


@pytest.fixture
def client(store: ReadingStore) -> Iterator[FlaskClient]:
    app = create_app(store)
    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def filled_store(store: ReadingStore) -> ReadingStore:
    store.append(22.5, 15.0, T1)
    store.append(23.7, 14.2, T2)
    return store


@pytest.mark.parametrize("path", ["/", "/history", "/graph", "/api/graph"])
def test_empty_store_returns_not_found(client: FlaskClient, path: str) -> None:
    response = client.get(path)

    assert response.status_code == 404
    assert "Keine Temperaturdaten" in response.get_data(as_text=True)


def test_unknown_path_returns_not_found(client: FlaskClient) -> None:
    assert client.get("/nope").status_code == 404


def test_index_shows_latest_truncated(filled_store: ReadingStore, client: FlaskClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert "23 C" in body
    assert "14 C" in body


def test_history_lists_newest_first(filled_store: ReadingStore, client: FlaskClient) -> None:
    response = client.get("/history")

    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert body.index("23.7 C") < body.index("22.5 C")
    assert format_local(T2) in body


def test_graph_embeds_ascending_series(filled_store: ReadingStore, client: FlaskClient) -> None:
    response = client.get("/graph")

    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert "chart.js" in body
    assert body.index(T1.isoformat()) < body.index(T2.isoformat())


def test_api_graph_returns_series(filled_store: ReadingStore, client: FlaskClient) -> None:
    response = client.get("/api/graph")

    assert response.status_code == 200
    assert response.get_json() == {
        "times": [T1.isoformat(), T2.isoformat()],
        "inside": [22.5, 23.7],
        "outside": [15.0, 14.2],
    }


@pytest.mark.parametrize("path", ["/", "/history", "/graph", "/api/graph"])
def test_read_error_returns_server_error(
    store: ReadingStore, client: FlaskClient, monkeypatch, path: str
) -> None:
    def broken(*_args, **_kwargs):
        raise ReadError("database is locked")

    monkeypatch.setattr(store, "latest", broken)
    monkeypatch.setattr(store, "all_ordered", broken)

    response = client.get(path)

    assert response.status_code == 500


def test_create_app_aborts_when_storage_unavailable(tmp_path) -> None:
    target = tmp_path / "db.sqlite"
    target.mkdir()

    with pytest.raises(StorageUnavailable):
        create_app(ReadingStore(target))


def test_format_local_uses_display_timezone() -> None:
    # Europe/Sofia liegt im Winter bei UTC+2
    assert format_local(T1) == "01-01-2024_12:00:00"


def test_build_series_of_empty_list() -> None:
    assert build_series([]) == {"times": [], "inside": [], "outside": []}


def test_setup_logging_writes_error_csv(tmp_path, monkeypatch) -> None:
    import logging

    import app as app_module
    from tasks import ERROR_LOGGER

    root_logger = logging.getLogger()
    root_handlers = list(root_logger.handlers)
    root_level = root_logger.level
    error_handlers = list(ERROR_LOGGER.handlers)
    monkeypatch.setattr(app_module, "_logging_configured", False)
    error_log = tmp_path / "log" / "errors.csv"
    try:
        app_module.setup_logging(str(tmp_path / "log" / "app.log"), str(error_log), "INFO")
        app_module.setup_logging(str(tmp_path / "log" / "app.log"), str(error_log), "INFO")
        assert len(ERROR_LOGGER.handlers) == len(error_handlers) + 1

        ERROR_LOGGER.error("FetchError: HTTP 500")
        for handler in ERROR_LOGGER.handlers:
            handler.flush()
    finally:
        for handler in set(root_logger.handlers) - set(root_handlers):
            root_logger.removeHandler(handler)
            handler.close()
        for handler in set(ERROR_LOGGER.handlers) - set(error_handlers):
            ERROR_LOGGER.removeHandler(handler)
            handler.close()
        root_logger.setLevel(root_level)

    line = error_log.read_text(encoding="utf-8").strip()
    timestamp, message = line.split(",", 1)
    assert timestamp
    assert message == "FetchError: HTTP 500"


@pytest.mark.parametrize("name", ["base.html", "index.html", "history.html", "graph.html"])
def test_templates_are_found_next_to_app_module(store: ReadingStore, name: str) -> None:
    app = create_app(store)

    assert name in app.jinja_loader.list_templates()


def test_templates_are_packaged() -> None:
    from pathlib import Path

    tomllib = pytest.importorskip("tomllib")
    pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
    setuptools_cfg = tomllib.loads(pyproject.read_text(encoding="utf-8"))["tool"]["setuptools"]

    assert "templates" in setuptools_cfg["packages"]
    assert setuptools_cfg["package-data"]["templates"] == ["*.html"]
