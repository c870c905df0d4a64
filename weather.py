"""Außentemperatur über die Open-Meteo API."""
from __future__ import annotations

from typing import Any

from config import FETCH_TIMEOUT_SECONDS, LATITUDE, LONGITUDE, OUTSIDE_TEMPERATURE_URL
from errors import ParseError
from fetch import TemperatureClient, to_temperature


class OutsideTemperatureClient(TemperatureClient):
    """Liest ``current.temperature_2m`` aus der Forecast-Antwort."""

    name = "outside"

    def __init__(
        self,
        latitude: float,
        longitude: float,
        timeout: float = 5.0,
        url_template: str = OUTSIDE_TEMPERATURE_URL,
    ) -> None:
        self.latitude = latitude
        self.longitude = longitude
        super().__init__(
            url_template.format(latitude=latitude, longitude=longitude),
            timeout=timeout,
        )

    def extract(self, payload: Any) -> float:
        try:
            value = payload["current"]["temperature_2m"]
        except (KeyError, TypeError, IndexError):
            raise ParseError(
                "outside: Feld current.temperature_2m fehlt", source=self.name
            ) from None
        return to_temperature(value, self.name)


def build_outside_client() -> OutsideTemperatureClient:
    return OutsideTemperatureClient(LATITUDE, LONGITUDE, timeout=FETCH_TIMEOUT_SECONDS)
