"""Entry <-> quad mapping.

An entry is exactly three facts about its ID:

    (<id>, <created-at>, time)
    (<id>, <contents>, "text")
    (<id>, <is-a>, <journal-entry>)
"""

import uuid
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from graph import IRI, Quad
from graph.quad import to_utc
from shared_types import NodeType, Predicate

from .errors import EncodingFailed, MalformedEntry
from .models import Entry

ENTRY_TYPE = IRI(NodeType.JOURNAL_ENTRY)
IS_A = IRI(Predicate.IS_A)
CREATED_AT = IRI(Predicate.CREATED_AT)
CONTENTS = IRI(Predicate.CONTENTS)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_entry_id() -> str:
    return str(uuid.uuid4())


def type_tag(entry_id: str) -> Quad:
    return Quad.make(entry_id, IS_A, ENTRY_TYPE)


def encode(
    contents: str,
    clock: Callable[[], datetime] = utc_now,
    id_factory: Callable[[], str] = new_entry_id,
) -> tuple[Entry, list[Quad]]:
    """Create a new entry for ``contents`` and the quads that persist it.

    Raises:
        EncodingFailed: contents is not a non-empty string, or the clock
            returned something other than a datetime.
    """
    if not isinstance(contents, str) or not contents:
        raise EncodingFailed("entry contents must be a non-empty string")

    created_at = clock()
    if not isinstance(created_at, datetime):
        raise EncodingFailed(f"clock returned {type(created_at).__name__}, not datetime")
    try:
        created_at = to_utc(created_at)
    except ValueError as e:
        raise EncodingFailed(f"cannot store creation time: {e}") from e

    entry = Entry(id=id_factory(), created_at=created_at, contents=contents)
    quads = [
        Quad.make(entry.id, CREATED_AT, entry.created_at),
        Quad.make(entry.id, CONTENTS, entry.contents),
        type_tag(entry.id),
    ]
    return entry, quads


def _single(entry_id: str, quads: list[Quad], predicate: IRI, expected: type):
    values = [q.object for q in quads if q.predicate == predicate]
    if not values:
        raise MalformedEntry(entry_id, f"missing {predicate} fact")
    if len(values) > 1:
        raise MalformedEntry(entry_id, f"{len(values)} {predicate} facts, expected 1")
    value = values[0]
    # IRI is a str subclass; a contents fact must be a plain literal
    if not isinstance(value, expected) or (expected is str and isinstance(value, IRI)):
        raise MalformedEntry(
            entry_id, f"{predicate} has {type(value).__name__} value, expected {expected.__name__}"
        )
    return value


def decode(entry_id: str, quads: Iterable[Quad]) -> Entry:
    """Rebuild an Entry from the quads whose subject is ``entry_id``.

    Predicates other than the three entry facts are ignored.

    Raises:
        MalformedEntry: type tag, created-at or contents missing, repeated,
            or of the wrong value kind.
    """
    quads = [q for q in quads if q.subject == entry_id]
    if not any(
        q.predicate == IS_A and isinstance(q.object, IRI) and q.object == ENTRY_TYPE
        for q in quads
    ):
        raise MalformedEntry(entry_id, f"not tagged {IS_A} {ENTRY_TYPE}")
    created_at = _single(entry_id, quads, CREATED_AT, datetime)
    contents = _single(entry_id, quads, CONTENTS, str)
    return Entry(id=str(entry_id), created_at=created_at, contents=contents)
