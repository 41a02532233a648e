from __future__ import annotations

from pathlib import Path

import pytest

from app.record_store import RecordNotFoundError, RecordStoreError, SqliteRecordStore
from schemas.document_schema import LineItem


def test_lists_rows_for_one_document_in_insertion_order(seeded_store: SqliteRecordStore) -> None:
    items = seeded_store.list_line_items("doc-1")
    assert [i.id for i in items] == ["li-1", "li-2", "li-3"]
    assert all(i.document_id == "doc-1" for i in items)
    assert [g.id for g in seeded_store.list_groups("doc-1")] == ["g-plumb", "g-empty"]
    assert seeded_store.list_groups("doc-2") == []


def test_round_trips_taxable_flags_and_nulls(seeded_store: SqliteRecordStore) -> None:
    valve = seeded_store.list_line_items("doc-1")[2]
    assert valve.taxable_labor is True
    assert valve.taxable_materials is False
    note = seeded_store.list_line_items("doc-1")[1]
    assert note.taxable_labor is None
    assert note.labor_hours is None


def test_get_price_book_item(seeded_store: SqliteRecordStore) -> None:
    item = seeded_store.get_price_book_item("pb-permit")
    assert item.title == "City permit"
    with pytest.raises(RecordNotFoundError, match="pb-missing"):
        seeded_store.get_price_book_item("pb-missing")


def test_duplicate_ids_raise_store_error(seeded_store: SqliteRecordStore) -> None:
    with pytest.raises(RecordStoreError, match="li-1"):
        seeded_store.add_line_item(LineItem(id="li-1", document_id="doc-1"))


def test_store_creates_parent_directory(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "dir" / "records.db"
    store = SqliteRecordStore(db_path=db_path)
    assert db_path.exists()
    assert store.list_price_book() == []
