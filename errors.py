"""Fehlerhierarchie für Temperaturquellen und Datenbank."""
from __future__ import annotations


class TemperatureError(Exception):
    """Basisklasse aller tempreading-Fehler."""


class SourceError(TemperatureError):
    """Eine Temperaturquelle lieferte keinen Wert."""

    def __init__(self, message: str, *, source: str = "") -> None:
        self.source = source
        super().__init__(message)


class FetchError(SourceError):
    """Transportfehler, Zeitüberschreitung oder HTTP-Status außerhalb 2xx."""

    def __init__(
        self, message: str, *, source: str = "", status_code: int | None = None
    ) -> None:
        self.status_code = status_code
        super().__init__(message, source=source)


class ParseError(SourceError):
    """Antwort enthält keinen verwertbaren Temperaturwert."""


class StorageError(TemperatureError):
    """Fehler der Datenbankschicht."""


class StorageUnavailable(StorageError):
    """Datenbank kann nicht geöffnet oder initialisiert werden."""


class WriteError(StorageError):
    """Messung konnte nicht gespeichert werden."""


class ReadError(StorageError):
    """Messungen konnten nicht gelesen werden."""
