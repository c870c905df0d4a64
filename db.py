"""SQLite Datenbankzugriff für Temperaturmessungen."""
from __future__ import annotations

import enum
import logging
import sqlite3
import threading
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from errors import ReadError, StorageUnavailable, WriteError

LOGGER = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS tempreading (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    inside_temp REAL NOT NULL,
    outside_temp REAL NOT NULL,
    created_at TEXT NOT NULL
);
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_tempreading_created_at ON tempreading (created_at);
"""

SELECT_COLUMNS = "id, inside_temp, outside_temp, created_at"


@dataclass(frozen=True)
class Reading:
    inside_temp: float
    outside_temp: float
    created_at: datetime
    id: int | None = None


class Order(str, enum.Enum):
    """Sortierrichtung nach created_at."""

    ASC = "ASC"
    DESC = "DESC"


def _encode_timestamp(created_at: datetime) -> str:
    if created_at.tzinfo is None:
        raise ValueError("created_at muss eine Zeitzone haben")
    # feste Breite, damit die Textsortierung der Zeitsortierung entspricht
    return created_at.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _row_to_reading(row: sqlite3.Row) -> Reading:
    return Reading(
        inside_temp=row["inside_temp"],
        outside_temp=row["outside_temp"],
        created_at=datetime.fromisoformat(row["created_at"]),
        id=row["id"],
    )


class ReadingStore:
    """Append-only Tabelle der Messungen.

    Jede Operation öffnet eine eigene Verbindung, Lesezugriffe aus
    Request-Threads laufen daher parallel zum Schreiben. Schreibzugriffe
    werden über ein Lock serialisiert.
    """

    def __init__(self, path: str | Path, timeout: float = 10) -> None:
        self.path = Path(path)
        self.timeout = timeout
        self._write_lock = threading.Lock()

    def get_connection(self) -> sqlite3.Connection:
        """Öffnet eine neue Datenbankverbindung mit WAL und Zeitlimit."""
        conn = sqlite3.connect(self.path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        return conn

    def initialize(self) -> None:
        """Legt Verzeichnis, Tabelle und Index an (idempotent)."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with closing(self.get_connection()) as conn, conn:
                conn.execute(CREATE_TABLE_SQL)
                conn.execute(CREATE_INDEX_SQL)
        except (OSError, sqlite3.Error) as exc:
            raise StorageUnavailable(
                f"Datenbank {self.path} nicht verfügbar: {exc}"
            ) from exc
        LOGGER.info("Datenbank %s bereit", self.path)

    def append(
        self, inside_temp: float, outside_temp: float, created_at: datetime
    ) -> Reading:
        """Speichert eine Messung."""
        created_text = _encode_timestamp(created_at)
        with self._write_lock:
            try:
                with closing(self.get_connection()) as conn, conn:
                    cursor = conn.execute(
                        """
                        INSERT INTO tempreading (inside_temp, outside_temp, created_at)
                        VALUES (?, ?, ?)
                        """,
                        (inside_temp, outside_temp, created_text),
                    )
                    row_id = cursor.lastrowid
            except sqlite3.Error as exc:
                raise WriteError(f"Messung nicht gespeichert: {exc}") from exc
        return Reading(
            inside_temp=inside_temp,
            outside_temp=outside_temp,
            created_at=datetime.fromisoformat(created_text),
            id=row_id,
        )

    def latest(self) -> Reading | None:
        """Liest die neueste Messung oder None bei leerer Tabelle."""
        try:
            with closing(self.get_connection()) as conn:
                row = conn.execute(
                    f"SELECT {SELECT_COLUMNS} FROM tempreading "
                    "ORDER BY created_at DESC, id DESC LIMIT 1"
                ).fetchone()
        except sqlite3.Error as exc:
            raise ReadError(f"Neueste Messung nicht lesbar: {exc}") from exc
        return _row_to_reading(row) if row is not None else None

    def all_ordered(self, direction: Order = Order.ASC) -> list[Reading]:
        """Liest alle Messungen, sortiert nach created_at und id."""
        order = Order(direction).value
        try:
            with closing(self.get_connection()) as conn:
                rows = conn.execute(
                    f"SELECT {SELECT_COLUMNS} FROM tempreading "
                    f"ORDER BY created_at {order}, id {order}"
                ).fetchall()
        except sqlite3.Error as exc:
            raise ReadError(f"Messungen nicht lesbar: {exc}") from exc
        return [_row_to_reading(row) for row in rows]
