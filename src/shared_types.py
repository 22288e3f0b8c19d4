"""Shared enums and types for jrnl."""

from enum import StrEnum


class Predicate(StrEnum):
    IS_A = "is-a"
    CREATED_AT = "created-at"
    CONTENTS = "contents"


class NodeType(StrEnum):
    JOURNAL_ENTRY = "journal-entry"


class OutputFormat(StrEnum):
    TEXT = "text"
    JSON = "json"
