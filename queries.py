"""Lesezugriff für die Weboberfläche."""
from __future__ import annotations

from db import Order, Reading, ReadingStore


class QueryService:
    """Reicht Ergebnisse des ReadingStore durch.

    Keine Daten: ``None`` bzw. leere Liste. Speicherfehler: ``ReadError``.
    """

    def __init__(self, store: ReadingStore) -> None:
        self._store = store

    def latest(self) -> Reading | None:
        return self._store.latest()

    def history(self, direction: Order = Order.DESC) -> list[Reading]:
        return self._store.all_ordered(direction)
