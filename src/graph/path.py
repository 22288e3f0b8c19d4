"""Path queries over the quad store.

A path starts from a set of nodes and walks edges::

    Path(store).has("is-a", IRI("journal-entry")).tag("entry")
        .out("created-at").filter(CompareOp.GTE, since).back("entry")

Each step narrows or moves the current node set. The whole path compiles to
a single SELECT with one self-join on ``quads`` per step that touches an edge.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum

from .quad import IRI, Value, decode_value, encode_value
from .store import QuadStore


class CompareOp(StrEnum):
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="


@dataclass(frozen=True)
class _Step:
    kind: str
    args: tuple = ()


@dataclass
class _Query:
    joins: list[str] = field(default_factory=list)
    join_params: list = field(default_factory=list)
    where: list[str] = field(default_factory=list)
    where_params: list = field(default_factory=list)
    n: int = 0

    def alias(self) -> str:
        name = f"q{self.n}"
        self.n += 1
        return name


class Path:
    """Immutable traversal builder; every step returns a new Path."""

    def __init__(self, store: QuadStore, steps: tuple[_Step, ...] = ()):
        self._store = store
        self._steps = steps

    def _then(self, kind: str, *args) -> "Path":
        return Path(self._store, self._steps + (_Step(kind, args),))

    def has(self, predicate: str, obj: Value) -> "Path":
        """Keep nodes with an outgoing ``predicate`` edge to ``obj``.

        As the first step, starts from every subject with such an edge.
        """
        return self._then("has", IRI(predicate), obj)

    def tag(self, name: str) -> "Path":
        """Remember the current node set under ``name``."""
        return self._then("tag", name)

    def out(self, predicate: str) -> "Path":
        """Move to the objects of ``predicate`` edges."""
        return self._then("out", IRI(predicate))

    def filter(self, op: CompareOp, value: Value) -> "Path":
        """Keep current nodes comparing ``op`` against ``value``; other kinds never match."""
        return self._then("filter", CompareOp(op), value)

    def back(self, name: str) -> "Path":
        """Return to the nodes tagged ``name`` that reached this point."""
        return self._then("back", name)

    def compile(self) -> tuple[str, list]:
        """Build the SQL statement and parameters for this path.

        Raises:
            ValueError: malformed path (no leading has(), unknown tag) or a
                value with no quad representation.
        """
        if not self._steps or self._steps[0].kind != "has":
            raise ValueError("Path must start with has()")

        q = _Query()
        tags: dict[str, tuple[str, str]] = {}
        # (value column, kind expression) of the current node set
        current: tuple[str, str] | None = None

        for step in self._steps:
            if step.kind == "has":
                predicate, obj = step.args
                kind, stored = encode_value(obj)
                alias = q.alias()
                if current is None:
                    q.joins.append(f"quads {alias}")
                else:
                    q.joins.append(f"JOIN quads {alias} ON {alias}.subject = {current[0]}")
                    q.where.append(f"{current[1]} = 'iri'")
                q.where.append(
                    f"{alias}.predicate = ? AND {alias}.object_kind = ? AND {alias}.object = ?"
                )
                q.where_params.extend([str(predicate), kind.value, stored])
                current = (f"{alias}.subject", "'iri'")
            elif step.kind == "tag":
                tags[step.args[0]] = current
            elif step.kind == "out":
                alias = q.alias()
                q.joins.append(
                    f"JOIN quads {alias} ON {alias}.subject = {current[0]} "
                    f"AND {alias}.predicate = ?"
                )
                q.join_params.append(str(step.args[0]))
                current = (f"{alias}.object", f"{alias}.object_kind")
            elif step.kind == "filter":
                op, value = step.args
                kind, stored = encode_value(value)
                q.where.append(f"{current[1]} = ? AND {current[0]} {op.value} ?")
                q.where_params.extend([kind.value, stored])
            elif step.kind == "back":
                name = step.args[0]
                if name not in tags:
                    raise ValueError(f"Unknown tag: {name}")
                current = tags[name]
            else:
                raise ValueError(f"Unknown path step: {step.kind}")

        sql = f"SELECT DISTINCT {current[0]}, {current[1]} FROM " + " ".join(q.joins)
        if q.where:
            sql += " WHERE " + " AND ".join(f"({w})" for w in q.where)
        return sql, q.join_params + q.where_params

    def nodes(self) -> list[Value]:
        """Run the path and return the distinct values of the final node set."""
        sql, params = self.compile()
        return [decode_value(kind, raw) for raw, kind in self._store.execute_query(sql, params)]

    def __iter__(self) -> Iterator[Value]:
        return iter(self.nodes())
