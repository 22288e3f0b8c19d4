"""Journal data models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from graph.quad import to_utc


@dataclass(frozen=True)
class Entry:
    id: str
    created_at: datetime  # aware, UTC
    contents: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "contents": self.contents,
        }

    def __str__(self) -> str:
        body = self.contents.rstrip("\n")
        return f"{self.created_at.isoformat()} {body}"


@dataclass(frozen=True)
class GetOptions:
    """Creation-time bounds for Journal.get: ``[after, before)``.

    Either bound may be None. Naive datetimes are taken as UTC.
    """

    before: Optional[datetime] = None
    after: Optional[datetime] = None

    @property
    def is_empty_interval(self) -> bool:
        if self.before is None or self.after is None:
            return False
        return to_utc(self.before) <= to_utc(self.after)
