"""Zentrale Konfiguration für tempreading.

Zeitstempel werden in UTC gespeichert, die Anzeige erfolgt in DISPLAY_TIMEZONE.
Jeder Wert kann über eine Umgebungsvariable überschrieben werden.
"""
from __future__ import annotations

import math
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_int_env(name: str, default: int) -> int:
    candidate = _read_str_env(name, "")
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_float_env(name: str, default: float, positive: bool = False) -> float:
    candidate = _read_str_env(name, "")
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if not math.isfinite(parsed) or (positive and parsed <= 0):
        return default
    return parsed


def _read_timezone_env(name: str, default: str) -> ZoneInfo:
    try:
        return ZoneInfo(_read_str_env(name, default))
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(default)


# Zeitzone für die Anzeige (Speicherung immer UTC)
DISPLAY_TIMEZONE = _read_timezone_env("TEMPREADING_TIMEZONE", "Europe/Sofia")

# Datenbank
DB_PATH = _read_str_env("TEMPREADING_DB_PATH", "./db/tempreading.db")
DB_TIMEOUT_SECONDS = _read_int_env("TEMPREADING_DB_TIMEOUT", 10)

# Temperaturquellen
INSIDE_TEMPERATURE_URL = _read_str_env(
    "TEMPREADING_INSIDE_URL", "http://192.168.5.116/temperaturec"
)
OUTSIDE_TEMPERATURE_URL = (
    "https://api.open-meteo.com/v1/forecast"
    "?latitude={latitude}&longitude={longitude}&current=temperature_2m"
)
LATITUDE = _read_float_env("TEMPREADING_LATITUDE", 42.6977)
LONGITUDE = _read_float_env("TEMPREADING_LONGITUDE", 23.3219)
FETCH_TIMEOUT_SECONDS = _read_float_env("TEMPREADING_FETCH_TIMEOUT", 5.0, positive=True)

# Messintervall (20 Minuten)
SAMPLE_INTERVAL_SECONDS = _read_int_env("TEMPREADING_INTERVAL", 20 * 60)

# Server
SERVER_HOST = _read_str_env("TEMPREADING_HOST", "0.0.0.0")
SERVER_PORT = _read_int_env("TEMPREADING_PORT", 8513)

# Logging
LOG_PATH = _read_str_env("TEMPREADING_LOG_PATH", "./log/tempreading.log")
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3
LOG_LEVEL = _read_str_env("TEMPREADING_LOG_LEVEL", "INFO").upper()
ERROR_LOG_PATH = _read_str_env("TEMPREADING_ERROR_LOG", "./log/errors.csv")
