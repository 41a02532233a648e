from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from uuid import uuid4

from app.line_engine import LineItemLike, coerce_number, record_field
from schemas.document_schema import LineItem, PriceBookItem


def _haystack(item: PriceBookItem) -> str:
    return " ".join(
        [item.title or "", item.description or "", item.item_type or "", item.pricing_mode or ""]
    ).lower()


def filter_price_book(items: Iterable[PriceBookItem], query: str | None) -> list[PriceBookItem]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(items)
    return [item for item in items if needle in _haystack(item)]


def next_sort_order(existing: Iterable[LineItemLike]) -> int:
    orders = [coerce_number(record_field(item, "sort_order"), 0) for item in existing]
    if not orders:
        return 0
    return int(max(orders)) + 1


def line_item_from_price_book(
    item: PriceBookItem,
    document_id: str,
    *,
    sort_order: int,
    group_id: str | None = None,
    line_item_id: str | None = None,
    created_at: str | None = None,
) -> LineItem:
    """Copy a price book entry onto a document as a new line item.

    Pricing fields are copied as stored; the engine coerces them at render
    time. Quantity falls back to 1 and unit falls back to ``default_unit``.
    """
    return LineItem(
        id=line_item_id or str(uuid4()),
        document_id=document_id,
        group_id=group_id,
        item_type=item.item_type,
        title=item.title,
        description=item.description,
        qty=coerce_number(item.default_qty, 1),
        unit=item.unit or item.default_unit,
        sort_order=sort_order,
        labor_hours=item.labor_hours,
        labor_rate=item.labor_rate,
        taxable_labor=bool(item.taxable_labor),
        materials_cost=item.materials_cost,
        materials_markup_pct=item.materials_markup_pct,
        taxable_materials=bool(item.taxable_materials),
        created_at=created_at or datetime.now(timezone.utc).isoformat(),
    )
