"""Innentemperatur vom lokalen Sensor-Endpunkt."""
from __future__ import annotations

from typing import Any

from config import FETCH_TIMEOUT_SECONDS, INSIDE_TEMPERATURE_URL
from fetch import TemperatureClient, to_temperature


class InsideTemperatureClient(TemperatureClient):
    """Der Sensor antwortet direkt mit dem Messwert, z.B. ``21.5``."""

    name = "inside"

    def extract(self, payload: Any) -> float:
        return to_temperature(payload, self.name)


def build_inside_client() -> InsideTemperatureClient:
    return InsideTemperatureClient(INSIDE_TEMPERATURE_URL, timeout=FETCH_TIMEOUT_SECONDS)
