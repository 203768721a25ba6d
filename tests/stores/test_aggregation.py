from __future__ import annotations

from jsdocmd.models import DocRecord
from jsdocmd.stores import AggregationStore


def _records(*names: str) -> list[DocRecord]:
    return [DocRecord(name=name) for name in names]


def test_upsert_groups_files_by_module() -> None:
    store = AggregationStore()
    store.upsert("pkg", "pkg/b.js", _records("b"))
    store.upsert("pkg", "pkg/a.js", _records("a1", "a2"))

    assert "pkg" in store
    assert store.files("pkg") == {"pkg/a.js", "pkg/b.js"}
    assert [record.name for record in store.bucket("pkg")] == ["a1", "a2", "b"]
    assert store.dirty_modules() == {"pkg"}
    assert store.dirty_modules() == set()


def test_upsert_replaces_previous_records() -> None:
    store = AggregationStore()
    store.upsert("pkg", "pkg/a.js", _records("old"))
    store.upsert("pkg", "pkg/a.js", _records("new"))

    assert [record.name for record in store.bucket("pkg")] == ["new"]


def test_moving_a_file_prunes_the_old_module() -> None:
    store = AggregationStore()
    store.upsert("foo", "a.js", _records("a"))
    store.dirty_modules()

    store.upsert("bar", "a.js", _records("a"))

    assert "foo" not in store
    assert store.modules() == ["bar"]
    assert store.module_of("a.js") == "bar"
    assert store.dirty_modules() == {"foo", "bar"}


def test_module_survives_while_other_files_contribute() -> None:
    store = AggregationStore()
    store.upsert("pkg", "pkg/a.js", _records("a"))
    store.upsert("pkg", "pkg/b.js", _records("b"))

    store.remove("pkg/a.js")

    assert "pkg" in store
    assert store.files("pkg") == {"pkg/b.js"}


def test_remove_unknown_file_is_a_noop() -> None:
    store = AggregationStore()
    store.remove("missing.js")

    assert len(store) == 0
    assert store.dirty_modules() == set()


def test_empty_records_remove_the_file() -> None:
    store = AggregationStore()
    store.upsert("pkg", "pkg/a.js", _records("a"))
    store.dirty_modules()

    store.upsert("pkg", "pkg/a.js", [])

    assert "pkg" not in store
    assert store.module_of("pkg/a.js") is None
    assert store.dirty_modules() == {"pkg"}


def test_empty_records_for_unknown_file_leave_store_untouched() -> None:
    store = AggregationStore()
    store.upsert("pkg", "pkg/a.js", [])

    assert len(store) == 0
    assert store.dirty_modules() == set()
