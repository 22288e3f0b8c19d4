"""Tests for QuadStore: init, open, batch writes, subject lookup."""

import sqlite3
from datetime import datetime, timezone

import pytest

from graph import (
    IRI,
    Quad,
    QuadStore,
    QuadStoreError,
    StoreExistsError,
    StoreLockedError,
    StoreNotInitialized,
    init_quad_store,
)
from graph import store as store_module


@pytest.fixture
def qs(tmp_path):
    path = init_quad_store(tmp_path / "quads.db")
    s = QuadStore.open(path)
    yield s
    s.close()


def _q(subject="s1", predicate="p", obj="o"):
    return Quad.make(subject, predicate, obj)


class TestInit:
    def test_creates_file(self, tmp_path):
        path = init_quad_store(tmp_path / "sub" / "quads.db")
        assert path.exists()

    def test_refuses_existing_file(self, tmp_path):
        path = init_quad_store(tmp_path / "quads.db")
        with pytest.raises(StoreExistsError):
            init_quad_store(path)

    def test_failed_init_leaves_no_file(self, tmp_path, monkeypatch):
        path = tmp_path / "quads.db"
        monkeypatch.setattr(store_module, "_SCHEMA", ("CREATE TABLE broken (",))
        with pytest.raises(QuadStoreError):
            init_quad_store(path)
        assert not path.exists()


class TestOpen:
    def test_missing_file(self, tmp_path):
        with pytest.raises(StoreNotInitialized):
            QuadStore.open(tmp_path / "nope.db")

    def test_plain_sqlite_file_is_not_a_store(self, tmp_path):
        path = tmp_path / "other.db"
        conn = sqlite3.connect(path)
        conn.execute("CREATE TABLE t (x)")
        conn.commit()
        conn.close()
        with pytest.raises(StoreNotInitialized):
            QuadStore.open(path)

    def test_garbage_file_is_rejected(self, tmp_path):
        path = tmp_path / "garbage.db"
        path.write_bytes(b"not a database at all" * 100)
        with pytest.raises(QuadStoreError):
            QuadStore.open(path)

    def test_close_is_idempotent(self, qs):
        qs.close()
        qs.close()
        assert qs.closed

    def test_use_after_close(self, qs):
        qs.close()
        with pytest.raises(QuadStoreError):
            qs.count()

    def test_context_manager_closes(self, tmp_path):
        path = init_quad_store(tmp_path / "quads.db")
        with QuadStore.open(path) as s:
            assert not s.closed
        assert s.closed


class TestWriter:
    def test_nothing_visible_before_flush(self, qs):
        w = qs.writer()
        w.add_quad(_q())
        w.add_quad(_q(predicate="p2"))
        assert w.pending == 2
        assert qs.count() == 0
        assert w.flush() == 2
        assert qs.count() == 2
        assert w.pending == 0

    def test_flush_empty_is_noop(self, qs):
        assert qs.writer().flush() == 0

    def test_invalid_quad_rejected_at_add(self, qs):
        w = qs.writer()
        with pytest.raises(TypeError):
            w.add_quad(_q(obj=object()))
        assert w.pending == 0

    def test_duplicates_are_ignored(self, qs):
        qs.add_quad(_q())
        assert qs.add_quad(_q()) == 0
        assert qs.count() == 1

    def test_string_and_iri_objects_are_distinct(self, qs):
        qs.add_quads([_q(obj="x"), _q(obj=IRI("x"))])
        assert qs.count() == 2

    def test_failed_flush_rolls_back(self, qs, monkeypatch):
        w = qs.writer()
        w.add_quad(_q())
        w.add_quad(_q(predicate="p2"))

        real_conn = qs._conn

        class FailingConn:
            total_changes = 0

            def execute(self, sql, *args):
                return real_conn.execute(sql, *args)

            def executemany(self, sql, rows):
                raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(qs, "_conn", FailingConn())
        with pytest.raises(QuadStoreError):
            w.flush()
        monkeypatch.setattr(qs, "_conn", real_conn)
        assert qs.count() == 0
        # buffer kept so the caller can decide what to do
        assert w.pending == 2

    def test_locked_database_surfaces(self, tmp_path):
        path = init_quad_store(tmp_path / "quads.db")
        holder = sqlite3.connect(path, isolation_level=None)
        holder.execute("BEGIN IMMEDIATE")
        try:
            with QuadStore.open(path, timeout=0.05) as s:
                with pytest.raises(StoreLockedError):
                    s.add_quad(_q())
        finally:
            holder.execute("ROLLBACK")
            holder.close()

    def test_read_only_rejects_writes(self, tmp_path):
        path = init_quad_store(tmp_path / "quads.db")
        with QuadStore.open(path, read_only=True) as s:
            with pytest.raises(QuadStoreError):
                s.add_quad(_q())


class TestLookup:
    def test_quads_for_subjects_groups_and_decodes(self, qs):
        when = datetime(2024, 3, 5, 9, 0, tzinfo=timezone.utc)
        qs.add_quads(
            [
                Quad.make("a", "created-at", when),
                Quad.make("a", "contents", "hello"),
                Quad.make("b", "contents", "other"),
            ]
        )
        grouped = qs.quads_for_subjects(["a", "missing"])
        assert set(grouped) == {"a", "missing"}
        assert grouped["missing"] == []
        objects = {q.predicate: q.object for q in grouped["a"]}
        assert objects["created-at"] == when
        assert objects["contents"] == "hello"

    def test_quads_iterates_in_insertion_order(self, qs):
        qs.add_quads([_q(subject="s1"), _q(subject="s2"), _q(subject="s3")])
        assert [q.subject for q in qs.quads()] == ["s1", "s2", "s3"]

    def test_labels_round_trip(self, qs):
        qs.add_quad(Quad.make("s", "p", "o", label="ctx"))
        [quad] = list(qs.quads())
        assert quad.label == "ctx"
