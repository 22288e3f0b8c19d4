"""Shared SQLite helpers: WAL mode, durability and busy-timeout defaults."""

import sqlite3
from pathlib import Path


def wal_connect(
    db_path: str | Path,
    timeout: float = 5.0,
    read_only: bool = False,
) -> sqlite3.Connection:
    """Open SQLite connection with WAL journal mode and full fsync on commit.

    Transactions are managed explicitly by the caller (``isolation_level=None``).

    Args:
        db_path: Path to database file.
        timeout: Seconds to wait on a locked database before failing.
        read_only: Open with ``mode=ro`` so the file is never created or written.
    """
    if read_only:
        uri = f"{Path(db_path).resolve().as_uri()}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, timeout=timeout, isolation_level=None)
    else:
        conn = sqlite3.connect(str(db_path), timeout=timeout, isolation_level=None)
    try:
        if not read_only:
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=FULL")
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def is_locked_error(err: sqlite3.Error) -> bool:
    """True when SQLite gave up waiting for another connection's lock."""
    msg = str(err).lower()
    return isinstance(err, sqlite3.OperationalError) and (
        "database is locked" in msg or "database is busy" in msg
    )
