"""Journal error taxonomy.

Every store-layer failure reaches callers as one of these, wrapped with the
operation and entity it concerned. Nothing here is retried.
"""


class JournalError(Exception):
    """Base class for all journal failures."""


class ConfigurationError(JournalError):
    """Home directory or backing-file path cannot be determined, or config is invalid."""


class StoreInitFailed(JournalError):
    """Backing file could not be initialized."""


class StoreOpenFailed(JournalError):
    """Backing file could not be opened."""


class StoreLocked(StoreOpenFailed):
    """Another process holds the store's lock."""


class StoreWriteFailed(JournalError):
    """Store rejected the entry's facts."""


class FlushFailed(JournalError):
    """Durability of a write could not be confirmed. Safe to retry."""


class QueryFailed(JournalError):
    """Store iteration or comparison failed."""


class MalformedEntry(JournalError):
    """A subject tagged as a journal entry is missing or has invalid facts."""

    def __init__(self, entry_id: str, reason: str):
        super().__init__(f"malformed journal entry {entry_id}: {reason}")
        self.entry_id = entry_id
        self.reason = reason


class EncodingFailed(JournalError):
    """Entry contents could not be turned into facts."""


class TimeParseFailed(JournalError):
    """A time expression could not be resolved."""

    def __init__(self, expression: str, reason: str = ""):
        msg = f"failed to parse time from {expression!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.expression = expression
