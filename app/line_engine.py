from __future__ import annotations

import logging
import math
import numbers
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

from schemas.document_schema import Group, LineItem

logger = logging.getLogger(__name__)

UNGROUPED_KEY = "ungrouped"
UNGROUPED_LABEL = "Items"
DEFAULT_GROUP_LABEL = "Group"

LineItemLike = Union[LineItem, Mapping[str, Any]]
GroupLike = Union[Group, Mapping[str, Any]]


@dataclass(frozen=True)
class ComputedLine:
    qty: float
    labor_total: float
    materials_total: float
    line_total: float
    taxable_amount: float


@dataclass(frozen=True)
class Section:
    key: str
    label: str
    items: tuple[LineItemLike, ...]


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: float
    taxable_subtotal: float


def coerce_number(value: Any, fallback: float) -> float:
    """Return ``value`` if it is a finite real number, otherwise ``fallback``.

    Strings are not parsed and booleans are not numbers here; both fall back.
    Integers too large to convert to a float fall back as well.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return fallback
    try:
        finite = math.isfinite(value)
    except (OverflowError, TypeError, ValueError):
        return fallback
    return value if finite else fallback


def record_field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _group_key(item: LineItemLike) -> str | None:
    group_id = record_field(item, "group_id")
    if group_id is None or group_id == "":
        return None
    return str(group_id)


def compute_line(item: LineItemLike) -> ComputedLine:
    # qty is resolved for display but is not a multiplier on either total.
    qty = coerce_number(record_field(item, "qty"), 1)
    # Every product and sum is re-coerced so an overflow to inf reads as 0.
    labor_total = coerce_number(
        coerce_number(record_field(item, "labor_hours"), 0)
        * coerce_number(record_field(item, "labor_rate"), 0),
        0,
    )
    materials_total = coerce_number(
        coerce_number(record_field(item, "materials_cost"), 0)
        * (1 + coerce_number(record_field(item, "materials_markup_pct"), 0) / 100),
        0,
    )
    line_total = coerce_number(labor_total + materials_total, 0)
    taxable_amount = coerce_number(
        (labor_total if record_field(item, "taxable_labor") else 0)
        + (materials_total if record_field(item, "taxable_materials") else 0),
        0,
    )
    return ComputedLine(
        qty=qty,
        labor_total=labor_total,
        materials_total=materials_total,
        line_total=line_total,
        taxable_amount=taxable_amount,
    )


def group_label(group: GroupLike) -> str:
    for field_name in ("name", "title"):
        value = record_field(group, field_name)
        if isinstance(value, str) and value.strip():
            return value
    return DEFAULT_GROUP_LABEL


def _item_sort_key(item: LineItemLike) -> tuple[float, str]:
    created_at = record_field(item, "created_at")
    return (
        coerce_number(record_field(item, "sort_order"), 0),
        created_at if isinstance(created_at, str) else "",
    )


def build_sections(
    line_items: Iterable[LineItemLike],
    groups: Iterable[GroupLike] = (),
) -> list[Section]:
    ordered_groups = sorted(groups, key=lambda g: coerce_number(record_field(g, "sort_order"), 0))
    known_ids = {str(record_field(g, "id")) for g in ordered_groups}

    buckets: dict[str, list[LineItemLike]] = {}
    ungrouped: list[LineItemLike] = []
    for item in line_items:
        key = _group_key(item)
        if key is None:
            ungrouped.append(item)
        elif key in known_ids:
            buckets.setdefault(key, []).append(item)
        else:
            logger.warning(
                "Line item %s references unknown group %s; rendering it as ungrouped",
                record_field(item, "id"),
                key,
            )
            ungrouped.append(item)

    sections: list[Section] = []
    emitted: set[str] = set()
    for group in ordered_groups:
        key = str(record_field(group, "id"))
        members = buckets.get(key)
        # Duplicate group ids would otherwise emit the same members twice.
        if not members or key in emitted:
            continue
        emitted.add(key)
        sections.append(
            Section(key=key, label=group_label(group), items=tuple(sorted(members, key=_item_sort_key)))
        )

    if ungrouped:
        sections.append(
            Section(
                key=UNGROUPED_KEY,
                label=UNGROUPED_LABEL,
                items=tuple(sorted(ungrouped, key=_item_sort_key)),
            )
        )
    return sections


def compute_totals(line_items: Iterable[LineItemLike]) -> DocumentTotals:
    subtotal = 0.0
    taxable_subtotal = 0.0
    for item in line_items:
        computed = compute_line(item)
        subtotal = coerce_number(subtotal + computed.line_total, 0.0)
        taxable_subtotal = coerce_number(taxable_subtotal + computed.taxable_amount, 0.0)
    return DocumentTotals(subtotal=subtotal, taxable_subtotal=taxable_subtotal)
