"""Embedded quad store on SQLite.

One table of (subject, predicate, object, object_kind, label) rows plus a
metadata table that marks the file as an initialized quad store. Writes go
through explicit transactions; a ``QuadWriter`` buffers quads and makes them
visible all at once on ``flush``.
"""

import sqlite3
from collections.abc import Iterable, Iterator
from pathlib import Path

import structlog

from db import is_locked_error, wal_connect

from .quad import IRI, Quad, decode_value, encode_value

logger = structlog.get_logger()

SCHEMA_VERSION = 1
_SUBJECT_CHUNK = 500

_SCHEMA = (
    """
    CREATE TABLE quad_store_meta (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE quads (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        subject TEXT NOT NULL,
        predicate TEXT NOT NULL,
        object NOT NULL,
        object_kind TEXT NOT NULL,
        label TEXT NOT NULL DEFAULT '',
        UNIQUE (subject, predicate, object_kind, object, label)
    )
    """,
    "CREATE INDEX idx_quads_pred_obj ON quads(predicate, object_kind, object)",
    "CREATE INDEX idx_quads_subject ON quads(subject, predicate)",
)


class QuadStoreError(Exception):
    """Base error for quad store failures."""


class StoreExistsError(QuadStoreError):
    """Raised when initializing over an existing file."""


class StoreNotInitialized(QuadStoreError):
    """Raised when opening a file that is not an initialized quad store."""


class StoreLockedError(QuadStoreError):
    """Raised when another connection holds the lock past the busy timeout."""


def _wrap(err: sqlite3.Error, action: str) -> QuadStoreError:
    if is_locked_error(err):
        return StoreLockedError(f"{action}: database is locked by another process")
    return QuadStoreError(f"{action}: {err}")


def _encode(quad: Quad) -> tuple:
    kind, stored = encode_value(quad.object)
    if not quad.subject or not quad.predicate:
        raise ValueError("Quad subject and predicate must be non-empty")
    return (str(quad.subject), str(quad.predicate), stored, kind.value, str(quad.label or ""))


def init_quad_store(db_path: str | Path) -> Path:
    """Create a new quad store file.

    The schema and metadata are written in a single transaction. If anything
    fails, the partially created file is removed.

    Raises:
        StoreExistsError: db_path already exists.
        QuadStoreError: schema creation failed.
    """
    db_path = Path(db_path).expanduser()
    if db_path.exists():
        raise StoreExistsError(f"Quad store already exists: {db_path}")
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = None
    try:
        conn = wal_connect(db_path)
        conn.execute("BEGIN IMMEDIATE")
        for stmt in _SCHEMA:
            conn.execute(stmt)
        conn.execute(
            "INSERT INTO quad_store_meta (key, value) VALUES ('schema_version', ?)",
            (str(SCHEMA_VERSION),),
        )
        conn.execute("COMMIT")
    except sqlite3.Error as e:
        if conn is not None:
            conn.close()
            conn = None
        for suffix in ("", "-wal", "-shm"):
            Path(f"{db_path}{suffix}").unlink(missing_ok=True)
        raise _wrap(e, f"failed to initialize {db_path}") from e
    finally:
        if conn is not None:
            conn.close()

    logger.info("quad_store_initialized", path=str(db_path), schema_version=SCHEMA_VERSION)
    return db_path


class QuadWriter:
    """Buffers quads and commits them in one transaction on flush."""

    def __init__(self, store: "QuadStore"):
        self._store = store
        self._pending: list[tuple] = []

    def add_quad(self, quad: Quad) -> None:
        """Validate and buffer a quad. Nothing is written until flush.

        Raises:
            TypeError / ValueError: the quad cannot be represented.
        """
        self._pending.append(_encode(quad))

    def add_quads(self, quads: Iterable[Quad]) -> None:
        for quad in quads:
            self.add_quad(quad)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def flush(self) -> int:
        """Commit all buffered quads atomically. Returns number of rows inserted."""
        if not self._pending:
            return 0
        inserted = self._store._insert_rows(self._pending)
        self._pending.clear()
        return inserted


class QuadStore:
    """Handle to an opened quad store file."""

    def __init__(self, conn: sqlite3.Connection, db_path: Path, read_only: bool = False):
        self._conn = conn
        self.db_path = db_path
        self.read_only = read_only

    @classmethod
    def open(cls, db_path: str | Path, read_only: bool = False, timeout: float = 5.0) -> "QuadStore":
        """Open an initialized quad store.

        Raises:
            StoreNotInitialized: file missing or not a quad store.
            StoreLockedError: file locked past the busy timeout.
            QuadStoreError: any other SQLite failure.
        """
        db_path = Path(db_path).expanduser()
        if not db_path.exists():
            raise StoreNotInitialized(f"Quad store not found: {db_path}")

        try:
            conn = wal_connect(db_path, timeout=timeout, read_only=read_only)
        except sqlite3.Error as e:
            raise _wrap(e, f"failed to open {db_path}") from e

        try:
            row = conn.execute(
                "SELECT value FROM quad_store_meta WHERE key = 'schema_version'"
            ).fetchone()
        except sqlite3.DatabaseError as e:
            conn.close()
            if is_locked_error(e):
                raise _wrap(e, f"failed to open {db_path}") from e
            raise StoreNotInitialized(f"Not a quad store: {db_path} ({e})") from e

        if row is None:
            conn.close()
            raise StoreNotInitialized(f"Quad store has no schema version: {db_path}")
        if int(row[0]) != SCHEMA_VERSION:
            conn.close()
            raise StoreNotInitialized(
                f"Unsupported quad store schema {row[0]} (expected {SCHEMA_VERSION}): {db_path}"
            )

        logger.debug("quad_store_opened", path=str(db_path), read_only=read_only)
        return cls(conn, db_path, read_only=read_only)

    @property
    def closed(self) -> bool:
        return self._conn is None

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("quad_store_closed", path=str(self.db_path))

    def __enter__(self) -> "QuadStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else ("ro" if self.read_only else "rw")
        return f"QuadStore({str(self.db_path)!r}, {state})"

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise QuadStoreError(f"Quad store is closed: {self.db_path}")
        return self._conn

    def writer(self) -> QuadWriter:
        return QuadWriter(self)

    def add_quad(self, quad: Quad) -> int:
        """Write a single quad in its own transaction."""
        return self._insert_rows([_encode(quad)])

    def add_quads(self, quads: Iterable[Quad]) -> int:
        """Write many quads in one transaction."""
        return self._insert_rows([_encode(q) for q in quads])

    def _insert_rows(self, rows: list[tuple]) -> int:
        if self.read_only:
            raise QuadStoreError(f"Quad store opened read-only: {self.db_path}")
        conn = self.conn
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise _wrap(e, "failed to begin write") from e
        try:
            before = conn.total_changes
            conn.executemany(
                """INSERT OR IGNORE INTO quads
                   (subject, predicate, object, object_kind, label)
                   VALUES (?, ?, ?, ?, ?)""",
                rows,
            )
            inserted = conn.total_changes - before
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            try:
                conn.execute("ROLLBACK")
            except sqlite3.Error:
                logger.warning("quad_store_rollback_failed", path=str(self.db_path))
            raise _wrap(e, "failed to commit quads") from e
        return inserted

    def quads_for_subjects(self, subjects: Iterable[str]) -> dict[IRI, list[Quad]]:
        """Fetch every quad whose subject is in ``subjects``, grouped by subject."""
        subjects = list(dict.fromkeys(str(s) for s in subjects))
        grouped: dict[IRI, list[Quad]] = {IRI(s): [] for s in subjects}
        for start in range(0, len(subjects), _SUBJECT_CHUNK):
            chunk = subjects[start : start + _SUBJECT_CHUNK]
            placeholders = ",".join("?" for _ in chunk)
            sql = (
                "SELECT subject, predicate, object, object_kind, label FROM quads "
                f"WHERE subject IN ({placeholders}) ORDER BY id"
            )
            for quad in self._select(sql, chunk):
                grouped[quad.subject].append(quad)
        return grouped

    def quads(self) -> Iterator[Quad]:
        """Iterate all quads in insertion order."""
        yield from self._select(
            "SELECT subject, predicate, object, object_kind, label FROM quads ORDER BY id", ()
        )

    def count(self) -> int:
        try:
            return self.conn.execute("SELECT COUNT(*) FROM quads").fetchone()[0]
        except sqlite3.Error as e:
            raise _wrap(e, "failed to count quads") from e

    def _select(self, sql: str, params) -> list[Quad]:
        try:
            rows = self.conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise _wrap(e, "failed to read quads") from e
        return [
            Quad(
                subject=IRI(s),
                predicate=IRI(p),
                object=decode_value(kind, o),
                label=IRI(label) if label else None,
            )
            for s, p, o, kind, label in rows
        ]

    def execute_query(self, sql: str, params: list) -> list[tuple]:
        """Run a compiled read query (see graph.path)."""
        try:
            return self.conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise _wrap(e, "failed to run query") from e
