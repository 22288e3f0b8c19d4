"""Append-only journal over the quad store."""

from collections.abc import Callable
from datetime import datetime
from typing import Optional

import structlog

from graph import CompareOp, Path, QuadStore, QuadStoreError, StoreLockedError

from . import codec
from .errors import FlushFailed, QueryFailed, StoreLocked, StoreWriteFailed
from .models import Entry, GetOptions

logger = structlog.get_logger()

_ENTRY_TAG = "entry"


class Journal:
    """Appends entries to and reads entries from an opened quad store.

    The store handle is owned by the caller; Journal never opens or closes it.
    """

    def __init__(
        self,
        store: QuadStore,
        clock: Callable[[], datetime] = codec.utc_now,
        id_factory: Callable[[], str] = codec.new_entry_id,
    ):
        self.store = store
        self._clock = clock
        self._id_factory = id_factory

    def add_entry(self, contents: str) -> Optional[str]:
        """Store a new entry and return its ID.

        Empty or whitespace-only contents are skipped without touching the
        store; returns None in that case.

        All three facts go through one writer and one flush, so they become
        durable together or not at all.

        Raises:
            EncodingFailed: contents could not be encoded.
            StoreWriteFailed: the store rejected the facts.
            FlushFailed: the commit failed; retrying is safe.
            StoreLocked: another process holds the write lock.
        """
        if contents is None or (isinstance(contents, str) and not contents.strip()):
            logger.warning("empty_entry_skipped")
            return None

        entry, quads = codec.encode(contents, clock=self._clock, id_factory=self._id_factory)

        if self.store.read_only:
            raise StoreWriteFailed(f"failed to store entry {entry.id}: store opened read-only")

        writer = self.store.writer()
        try:
            writer.add_quads(quads)
        except (TypeError, ValueError, QuadStoreError) as e:
            raise StoreWriteFailed(f"failed to store entry {entry.id}: {e}") from e

        try:
            writer.flush()
        except StoreLockedError as e:
            raise StoreLocked(f"failed to write entry {entry.id}: {e}") from e
        except QuadStoreError as e:
            raise FlushFailed(f"failed to write entry {entry.id}: {e}") from e

        logger.info("entry_added", entry_id=entry.id, created_at=entry.created_at.isoformat())
        return entry.id

    def build_query(self, options: GetOptions) -> Path:
        """Path selecting entry subjects created in ``[options.after, options.before)``."""
        path = Path(self.store).has(codec.IS_A, codec.ENTRY_TYPE).tag(_ENTRY_TAG)
        if options.before is not None:
            path = (
                path.out(codec.CREATED_AT)
                .filter(CompareOp.LT, options.before)
                .back(_ENTRY_TAG)
            )
        if options.after is not None:
            path = (
                path.out(codec.CREATED_AT)
                .filter(CompareOp.GTE, options.after)
                .back(_ENTRY_TAG)
            )
        return path

    def get(self, options: Optional[GetOptions] = None) -> list[Entry]:
        """Return entries created within the bounds of ``options``.

        Order is whatever the store yields; callers must not rely on it.

        Raises:
            QueryFailed: the store failed to run the query or load facts, or a
                bound cannot be expressed in UTC.
            MalformedEntry: a tagged subject lacks a valid entry fact.
        """
        options = options or GetOptions()
        try:
            if options.is_empty_interval:
                logger.debug(
                    "empty_interval", before=str(options.before), after=str(options.after)
                )
                return []
            subjects = self.build_query(options).nodes()
            facts = self.store.quads_for_subjects(subjects)
        except (QuadStoreError, ValueError, TypeError) as e:
            raise QueryFailed(f"failed to query entries: {e}") from e

        entries = [codec.decode(subject, quads) for subject, quads in facts.items()]
        logger.debug("entries_loaded", count=len(entries))
        return entries
