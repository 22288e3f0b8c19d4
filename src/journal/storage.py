"""Backing-file lifecycle: locate, initialize once, open, close."""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from graph import (
    QuadStore,
    QuadStoreError,
    StoreExistsError,
    StoreLockedError,
    StoreNotInitialized,
    init_quad_store,
)

from .errors import ConfigurationError, StoreInitFailed, StoreLocked, StoreOpenFailed

logger = structlog.get_logger()

DB_FILENAME = ".jrnl.db"


def default_db_path() -> Path:
    """``~/.jrnl.db``.

    Raises:
        ConfigurationError: the home directory cannot be determined.
    """
    home = os.environ.get("HOME")
    if not home:
        try:
            home = str(Path.home())
        except RuntimeError as e:
            raise ConfigurationError("cannot find HOME directory") from e
    return Path(home) / DB_FILENAME


def resolve_db_path(path: str | Path | None) -> Path:
    """Expand ``~`` in an explicit path, or fall back to the default location."""
    if path is None or str(path) == "":
        return default_db_path()
    raw = str(path)
    try:
        expanded = Path(raw).expanduser()
    except RuntimeError as e:
        raise ConfigurationError(f"cannot expand home directory in {raw!r}") from e
    if str(expanded).startswith("~"):
        raise ConfigurationError(f"cannot expand home directory in {raw!r}")
    return expanded


def ensure_initialized(db_path: Path) -> bool:
    """Initialize the backing file unless it already exists.

    Returns True when a new store was created.

    Raises:
        StoreInitFailed: initialization failed (no partial file is left behind).
    """
    try:
        if db_path.exists():
            return False
    except OSError as e:
        raise StoreInitFailed(f"failed to stat database file {db_path}: {e}") from e

    try:
        init_quad_store(db_path)
    except StoreExistsError:
        # created by a concurrent invocation between the check and the init
        return False
    except (QuadStoreError, OSError) as e:
        raise StoreInitFailed(f"failed to initialize database {db_path}: {e}") from e
    return True


def open_store(
    db_path: str | Path | None = None, read_only: bool = False, timeout: float = 5.0
) -> QuadStore:
    """Initialize (once) and open the journal store.

    Raises:
        ConfigurationError, StoreInitFailed, StoreOpenFailed, StoreLocked.
    """
    db_path = resolve_db_path(db_path)
    if ensure_initialized(db_path):
        logger.info("store_created", path=str(db_path))

    try:
        store = QuadStore.open(db_path, read_only=read_only, timeout=timeout)
    except StoreLockedError as e:
        raise StoreLocked(f"failed to open {db_path}: {e}") from e
    except StoreNotInitialized as e:
        raise StoreOpenFailed(f"{db_path} is not a journal store: {e}") from e
    except QuadStoreError as e:
        raise StoreOpenFailed(f"failed to open {db_path}: {e}") from e
    return store


@contextmanager
def store_session(
    db_path: str | Path | None = None, read_only: bool = False, timeout: float = 5.0
) -> Iterator[QuadStore]:
    """Open the store for the duration of a block and always close it."""
    store = open_store(db_path, read_only=read_only, timeout=timeout)
    try:
        yield store
    finally:
        store.close()
