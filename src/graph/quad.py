"""Quad and typed value encoding for the SQLite quad store."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Union

TIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class IRI(str):
    """A node identifier, as opposed to a plain string literal."""

    def __repr__(self) -> str:
        return f"<{str(self)}>"


class ValueKind(StrEnum):
    IRI = "iri"
    STRING = "string"
    TIME = "time"
    INT = "int"
    FLOAT = "float"


Value = Union[IRI, str, datetime, int, float]


def to_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime. Naive values are taken as UTC.

    Raises:
        ValueError: the instant falls outside years 1-9999 once shifted to UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    try:
        return value.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError(f"{value.isoformat()} is out of range in UTC") from e


def format_time(value: datetime) -> str:
    """Fixed-width UTC text; the year is zero-padded so lexical order is time order."""
    value = to_utc(value)
    return f"{value.year:04d}-{value:%m-%dT%H:%M:%S.%f}Z"


def encode_value(value: Value) -> tuple[ValueKind, str | int | float]:
    """Map a Python value to its (kind, stored form) pair.

    Times are stored as fixed-width UTC text so lexical order is time order.

    Raises:
        TypeError: value has no quad representation.
        ValueError: empty IRI, or a time out of range in UTC.
    """
    # bool is an int subclass; reject it rather than store 0/1
    if isinstance(value, bool):
        raise TypeError("bool is not a quad value")
    if isinstance(value, IRI):
        if not value:
            raise ValueError("IRI must not be empty")
        return ValueKind.IRI, str(value)
    if isinstance(value, str):
        return ValueKind.STRING, value
    if isinstance(value, datetime):
        return ValueKind.TIME, format_time(value)
    if isinstance(value, int):
        return ValueKind.INT, value
    if isinstance(value, float):
        return ValueKind.FLOAT, value
    raise TypeError(f"Unsupported quad value type: {type(value).__name__}")


def decode_value(kind: str, raw) -> Value:
    """Inverse of encode_value."""
    kind = ValueKind(kind)
    if kind is ValueKind.IRI:
        return IRI(raw)
    if kind is ValueKind.STRING:
        return str(raw)
    if kind is ValueKind.TIME:
        return datetime.strptime(raw, TIME_FORMAT).replace(tzinfo=timezone.utc)
    if kind is ValueKind.INT:
        return int(raw)
    return float(raw)


@dataclass(frozen=True)
class Quad:
    """A (subject, predicate, object, label) fact."""

    subject: IRI
    predicate: IRI
    object: Value
    label: IRI | None = None

    @classmethod
    def make(cls, subject, predicate, obj, label=None) -> "Quad":
        """Build a quad, promoting plain-string subject/predicate/label to IRIs."""
        return cls(
            subject=IRI(subject),
            predicate=IRI(predicate),
            object=obj,
            label=IRI(label) if label else None,
        )
