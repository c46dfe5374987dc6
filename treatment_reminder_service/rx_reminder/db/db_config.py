# rx_reminder/db/db_config.py

import sqlite3
from pathlib import Path
from typing import Optional

from rx_reminder.core.settings import DB_PATH


def get_sqlite_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """
    Create and configure SQLite connection with recommended PRAGMA settings.
    Shared by the workflow checkpointer and the treatment store.
    """
    path = Path(db_path or DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path), check_same_thread=False)

    # Performance & concurrency settings
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA busy_timeout=5000;")

    return conn
