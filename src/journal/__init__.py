from .errors import JournalError
from .journal import Journal
from .models import Entry, GetOptions
from .storage import open_store, store_session

__all__ = ["Journal", "Entry", "GetOptions", "JournalError", "open_store", "store_session"]
