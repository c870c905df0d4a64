"""Gemeinsamer HTTP-Abruf für Temperaturquellen."""
from __future__ import annotations

import http.client
import json
import logging
import math
import urllib.error
import urllib.request
from typing import Any

from errors import FetchError, ParseError

LOGGER = logging.getLogger(__name__)


def _download(url: str, timeout: float) -> bytes:
    with urllib.request.urlopen(url, timeout=timeout) as response:
        return response.read()


def to_temperature(value: Any, source: str) -> float:
    """Prüft, dass ein Wert eine endliche Zahl ist."""
    if isinstance(value, bool):
        raise ParseError(f"{source}: kein Temperaturwert: {value!r}", source=source)
    if isinstance(value, str):
        value = value.strip()
    try:
        temperature = float(value)
    except (TypeError, ValueError):
        raise ParseError(
            f"{source}: kein Temperaturwert: {value!r}", source=source
        ) from None
    if not math.isfinite(temperature):
        raise ParseError(f"{source}: ungültiger Wert {value!r}", source=source)
    return temperature


class TemperatureClient:
    """Liest genau einen Temperaturwert von einem HTTP-Endpunkt.

    Zustandslos, ohne Retries: jeder Aufruf liefert einen Wert oder
    wirft genau einen Fehler.
    """

    name = "temperature"

    def __init__(self, url: str, timeout: float = 5.0) -> None:
        self.url = url
        self.timeout = timeout

    def fetch(self) -> float:
        try:
            body = _download(self.url, self.timeout)
        except urllib.error.HTTPError as exc:
            raise FetchError(
                f"Fehler beim Abruf der {self.name}-Temperatur: HTTP {exc.code} {exc.reason}",
                source=self.name,
                status_code=exc.code,
            ) from exc
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as exc:
            raise FetchError(
                f"Fehler beim Abruf der {self.name}-Temperatur: {exc}",
                source=self.name,
            ) from exc

        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise ParseError(
                f"{self.name}: Antwort ist kein JSON", source=self.name
            ) from exc

        temperature = self.extract(payload)
        LOGGER.debug("%s-Temperatur %.2f °C", self.name, temperature)
        return temperature

    def extract(self, payload: Any) -> float:
        """Liest den Temperaturwert aus der dekodierten Antwort."""
        raise NotImplementedError
