"""Hintergrundaufgabe: Temperaturen abrufen und speichern."""
from __future__ import annotations

import atexit
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable

from db import Reading, ReadingStore
from errors import ReadError, SourceError, WriteError
from fetch import TemperatureClient

LOGGER = logging.getLogger(__name__)
ERROR_LOGGER = logging.getLogger("tempreading.errors")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Sampler:
    """Ruft pro Takt Innen- und Außentemperatur ab und speichert beide.

    Es läuft höchstens ein Zyklus gleichzeitig; Takte während eines
    laufenden Zyklus werden übersprungen.
    """

    def __init__(
        self,
        inside: TemperatureClient,
        outside: TemperatureClient,
        store: ReadingStore,
        interval: float,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.inside = inside
        self.outside = outside
        self.store = store
        self.interval = interval
        self.clock = clock
        self._cycle_lock = threading.Lock()
        self._last_created_at: datetime | None = None

    @property
    def is_sampling(self) -> bool:
        return self._cycle_lock.locked()

    def run_cycle(self) -> Reading | None:
        """Ein Messzyklus. Fehler werden protokolliert, nie weitergereicht."""
        if not self._cycle_lock.acquire(blocking=False):
            LOGGER.warning("Messzyklus läuft noch, Takt übersprungen")
            return None
        try:
            return self._sample()
        finally:
            self._cycle_lock.release()

    def _sample(self) -> Reading | None:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="fetch") as pool:
            futures = [pool.submit(self.inside.fetch), pool.submit(self.outside.fetch)]

        values: list[float] = []
        failed = False
        for future in futures:
            try:
                values.append(future.result())
            except SourceError as exc:
                ERROR_LOGGER.error("%s: %s", type(exc).__name__, exc)
                failed = True
        if failed:
            LOGGER.error("Keine Messung gespeichert (Quellenfehler)")
            return None

        inside_temp, outside_temp = values
        try:
            reading = self.store.append(inside_temp, outside_temp, self._next_timestamp())
        except WriteError as exc:
            ERROR_LOGGER.error("WriteError: %s", exc)
            return None
        LOGGER.info(
            "Messung gespeichert: innen %.2f °C, außen %.2f °C",
            reading.inside_temp,
            reading.outside_temp,
        )
        self._last_created_at = reading.created_at
        return reading

    def _next_timestamp(self) -> datetime:
        """Zeitstempel, der nie hinter dem zuletzt geschriebenen liegt."""
        if self._last_created_at is None:
            try:
                latest = self.store.latest()
            except ReadError as exc:
                LOGGER.warning("Letzte Messung nicht lesbar: %s", exc)
            else:
                if latest is not None:
                    self._last_created_at = latest.created_at
        created_at = self.clock()
        if self._last_created_at is not None and created_at < self._last_created_at:
            LOGGER.warning(
                "Systemuhr zurückgestellt (%s < %s), Zeitstempel angeglichen",
                created_at.isoformat(),
                self._last_created_at.isoformat(),
            )
            created_at = self._last_created_at
        return created_at

    def run_loop(self, stop_event: threading.Event) -> None:
        """Fester Takt; der erste Zyklus startet nach einem Intervall."""
        next_tick = time.monotonic() + self.interval
        while not stop_event.wait(max(0.0, next_tick - time.monotonic())):
            try:
                self.run_cycle()
            except Exception:
                LOGGER.exception("Unerwarteter Fehler im Messzyklus")

            next_tick += self.interval
            now = time.monotonic()
            if now > next_tick:
                missed = int((now - next_tick) // self.interval) + 1
                next_tick += missed * self.interval
                LOGGER.warning("%s Takt(e) übersprungen, Zyklus zu langsam", missed)


def start_background_sampler(sampler: Sampler) -> threading.Event:
    """Startet den Messthread und beendet ihn beim Prozessende."""
    stop_event = threading.Event()
    thread = threading.Thread(
        target=sampler.run_loop, args=(stop_event,), name="sampler", daemon=True
    )
    thread.start()
    atexit.register(stop_event.set)
    return stop_event
