from __future__ import annotations

from pathlib import Path

import pytest

from app.record_store import SqliteRecordStore
from schemas.document_schema import Group, LineItem, PriceBookItem


@pytest.fixture
def seeded_store(tmp_path: Path) -> SqliteRecordStore:
    store = SqliteRecordStore(db_path=tmp_path / "records.db")
    store.add_group(Group(id="g-plumb", document_id="doc-1", name="Plumbing", sort_order=1))
    store.add_group(Group(id="g-empty", document_id="doc-1", name="Electrical", sort_order=0))
    store.add_line_item(
        LineItem(
            id="li-1",
            document_id="doc-1",
            title="Service call",
            item_type="labor",
            labor_hours=1,
            labor_rate=95,
            sort_order=0,
            created_at="2026-10-01T09:00:00Z",
        )
    )
    store.add_line_item(
        LineItem(
            id="li-2",
            document_id="doc-1",
            title="Note",
            item_type="text",
            description="Customer supplies fixtures",
            sort_order=1,
            created_at="2026-10-01T09:05:00Z",
        )
    )
    store.add_line_item(
        LineItem(
            id="li-3",
            document_id="doc-1",
            group_id="g-plumb",
            title="Replace valve",
            item_type="labor",
            qty=2,
            unit="ea",
            labor_hours=2,
            labor_rate=50,
            taxable_labor=True,
            materials_cost=100,
            materials_markup_pct=20,
            taxable_materials=False,
            sort_order=0,
            created_at="2026-10-01T09:10:00Z",
        )
    )
    store.add_line_item(LineItem(id="li-other", document_id="doc-2", labor_hours=5, labor_rate=10))
    store.add_price_book_item(
        PriceBookItem(
            id="pb-heater",
            title="Water heater install",
            item_type="labor",
            pricing_mode="hourly",
            default_qty=1,
            default_unit="ea",
            labor_hours=3,
            labor_rate=90,
            taxable_labor=False,
            materials_cost=800,
            materials_markup_pct=15,
            taxable_materials=True,
        )
    )
    store.add_price_book_item(
        PriceBookItem(id="pb-permit", title="City permit", item_type="permit", materials_cost=120)
    )
    return store
