# rx_reminder/services/treatment_store.py
"""
Treatment persistence: load() everything, save(records) everything, or
save_record(record) to insert/replace one treatment by id. Single-record
writes never touch other rows, so concurrent writers on different treatments
do not lose each other's records; writers on the same treatment resolve as
last-writer-wins.
"""
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Protocol

from loguru import logger
from pydantic import ValidationError

from rx_reminder.db.db_config import get_sqlite_connection
from rx_reminder.schemas.models import TreatmentRecord

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS treatments (
    id TEXT PRIMARY KEY,
    position INTEGER NOT NULL,
    status TEXT NOT NULL,
    document TEXT NOT NULL
);
"""

UPSERT_SQL = """
INSERT INTO treatments (id, position, status, document)
VALUES (?, (SELECT COALESCE(MAX(position), -1) + 1 FROM treatments), ?, ?)
ON CONFLICT(id) DO UPDATE SET status = excluded.status, document = excluded.document
"""

class TreatmentStoreError(RuntimeError):
    pass

class TreatmentRepository(Protocol):
    def load(self) -> List[TreatmentRecord]: ...

    def save(self, records: List[TreatmentRecord]) -> None: ...

    def save_record(self, record: TreatmentRecord) -> None: ...

class InMemoryTreatmentStore:
    def __init__(self, records: Optional[List[TreatmentRecord]] = None) -> None:
        self._records: List[TreatmentRecord] = list(records or [])
        self._lock = threading.Lock()

    def load(self) -> List[TreatmentRecord]:
        with self._lock:
            return list(self._records)

    def save(self, records: List[TreatmentRecord]) -> None:
        with self._lock:
            self._records = list(records)

    def save_record(self, record: TreatmentRecord) -> None:
        with self._lock:
            for i, r in enumerate(self._records):
                if r.id == record.id:
                    self._records[i] = record
                    return
            self._records.append(record)

class SQLiteTreatmentStore:
    """Records stored as JSON documents (camelCase wire shape), one row each."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self._conn = get_sqlite_connection(db_path)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        with self._lock:
            self._conn.executescript(SCHEMA_SQL)
            self._conn.commit()

    def load(self) -> List[TreatmentRecord]:
        """Raises TreatmentStoreError on an unreadable row instead of dropping it."""
        with self._lock:
            rows = self._conn.execute("SELECT id, document FROM treatments ORDER BY position").fetchall()

        records: List[TreatmentRecord] = []
        for row in rows:
            try:
                records.append(TreatmentRecord.model_validate_json(row["document"]))
            except ValidationError as e:
                logger.error(f"Unreadable treatment document {row['id']}: {e}")
                raise TreatmentStoreError(f"Unreadable treatment document: {row['id']}") from e
        return records

    def save(self, records: List[TreatmentRecord]) -> None:
        rows = [
            (r.id, pos, r.status, r.model_dump_json(by_alias=True))
            for pos, r in enumerate(records)
        ]
        with self._lock:
            with self._conn:
                self._conn.execute("DELETE FROM treatments")
                self._conn.executemany(
                    "INSERT INTO treatments (id, position, status, document) VALUES (?, ?, ?, ?)",
                    rows,
                )
        logger.debug(f"Saved {len(rows)} treatments")

    def save_record(self, record: TreatmentRecord) -> None:
        with self._lock:
            with self._conn:
                self._conn.execute(UPSERT_SQL, (record.id, record.status, record.model_dump_json(by_alias=True)))
        logger.debug(f"Saved treatment {record.id}")

    def close(self) -> None:
        self._conn.close()
