"""Flask Anwendung für tempreading."""
from __future__ import annotations

import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import Flask, jsonify, render_template

from config import (
    DB_PATH,
    DB_TIMEOUT_SECONDS,
    DISPLAY_TIMEZONE,
    ERROR_LOG_PATH,
    LOG_BACKUP_COUNT,
    LOG_LEVEL,
    LOG_MAX_BYTES,
    LOG_PATH,
    SAMPLE_INTERVAL_SECONDS,
    SERVER_HOST,
    SERVER_PORT,
)
from db import Order, Reading, ReadingStore
from errors import ReadError
from queries import QueryService
from sensors import build_inside_client
from tasks import ERROR_LOGGER, Sampler, start_background_sampler
from weather import build_outside_client

LOGGER = logging.getLogger(__name__)

NO_DATA_MESSAGE = "Keine Temperaturdaten vorhanden"
TEXT_PLAIN = {"Content-Type": "text/plain; charset=utf-8"}

_logging_configured = False


def setup_logging(
    log_path: str = LOG_PATH, error_log_path: str = ERROR_LOG_PATH, level: str = LOG_LEVEL
) -> None:
    """Konfiguriert rotierendes Dateilogging und das CSV-Fehlerprotokoll."""
    global _logging_configured
    if _logging_configured:
        return

    for path in (log_path, error_log_path):
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    file_handler = RotatingFileHandler(
        log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT
    )
    file_handler.setFormatter(formatter)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # Fehlerprotokoll: eine Zeile "zeitstempel,nachricht" pro Fehler
    error_handler = logging.FileHandler(error_log_path, encoding="utf-8")
    error_handler.setFormatter(logging.Formatter("%(asctime)s,%(message)s"))
    ERROR_LOGGER.addHandler(error_handler)

    _logging_configured = True


def format_local(timestamp: datetime) -> str:
    """Formatiert einen UTC-Zeitstempel in der Anzeigezeitzone."""
    return timestamp.astimezone(DISPLAY_TIMEZONE).strftime("%d-%m-%Y_%H:%M:%S")


def build_series(readings: list[Reading]) -> dict:
    return {
        "times": [reading.created_at.isoformat() for reading in readings],
        "inside": [reading.inside_temp for reading in readings],
        "outside": [reading.outside_temp for reading in readings],
    }


def _no_data():
    return NO_DATA_MESSAGE, 404, TEXT_PLAIN


def create_app(store: ReadingStore | None = None) -> Flask:
    if store is None:
        store = ReadingStore(DB_PATH, timeout=DB_TIMEOUT_SECONDS)
    store.initialize()
    queries = QueryService(store)

    app = Flask(__name__)
    app.jinja_env.filters["local_time"] = format_local

    @app.errorhandler(ReadError)
    def read_error(exc: ReadError):
        LOGGER.error("Fehler beim Lesen der Messungen: %s", exc)
        return "500 - Interner Serverfehler", 500, TEXT_PLAIN

    @app.errorhandler(404)
    def not_found(_exc):
        return "404 - Nicht gefunden", 404, TEXT_PLAIN

    @app.route("/")
    def index():
        latest = queries.latest()
        if latest is None:
            return _no_data()
        return render_template("index.html", latest=latest)

    @app.route("/history")
    def history():
        readings = queries.history(Order.DESC)
        if not readings:
            return _no_data()
        return render_template("history.html", readings=readings)

    @app.route("/graph")
    def graph():
        readings = queries.history(Order.ASC)
        if not readings:
            return _no_data()
        return render_template("graph.html", series=build_series(readings))

    @app.route("/api/graph")
    def api_graph():
        readings = queries.history(Order.ASC)
        if not readings:
            return _no_data()
        return jsonify(build_series(readings))

    return app


def main() -> None:
    setup_logging()
    store = ReadingStore(DB_PATH, timeout=DB_TIMEOUT_SECONDS)
    app = create_app(store)

    sampler = Sampler(
        build_inside_client(), build_outside_client(), store, SAMPLE_INTERVAL_SECONDS
    )
    start_background_sampler(sampler)

    LOGGER.info("Server läuft auf http://%s:%s/", SERVER_HOST, SERVER_PORT)
    app.run(host=SERVER_HOST, port=SERVER_PORT, debug=False, use_reloader=False)


if __name__ == "__main__":
    main()
