from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from app.line_engine import (
    GroupLike,
    LineItemLike,
    build_sections,
    coerce_number,
    compute_line,
    compute_totals,
    record_field,
)
from app.logger import log_document_event
from app.money import DEFAULT_LOCALE, format_money
from app.record_store import DocumentRecordStore, RecordStoreError
from schemas.document_schema import DocumentView, RenderedLine, RenderedSection

logger = logging.getLogger(__name__)


def _render_line(item: LineItemLike, currency: str, locale: str) -> RenderedLine:
    computed = compute_line(item)
    return RenderedLine(
        id=str(record_field(item, "id")),
        title=record_field(item, "title"),
        description=record_field(item, "description"),
        item_type=record_field(item, "item_type"),
        unit=record_field(item, "unit"),
        qty=computed.qty,
        labor_total=computed.labor_total,
        materials_total=computed.materials_total,
        line_total=computed.line_total,
        taxable_amount=computed.taxable_amount,
        line_total_display=format_money(computed.line_total, currency, locale),
    )


def build_document_view(
    document_id: str,
    line_items: Sequence[LineItemLike],
    groups: Sequence[GroupLike] = (),
    *,
    currency: str = "USD",
    locale: str = DEFAULT_LOCALE,
) -> DocumentView:
    sections: list[RenderedSection] = []
    for section in build_sections(line_items, groups):
        rows = [_render_line(item, currency, locale) for item in section.items]
        subtotal = coerce_number(sum(row.line_total for row in rows), 0.0)
        sections.append(
            RenderedSection(
                key=section.key,
                label=section.label,
                rows=rows,
                subtotal=subtotal,
                subtotal_display=format_money(subtotal, currency, locale),
            )
        )

    totals = compute_totals(line_items)
    return DocumentView(
        document_id=document_id,
        currency=currency,
        locale=locale,
        sections=sections,
        item_count=len(line_items),
        subtotal=totals.subtotal,
        taxable_subtotal=totals.taxable_subtotal,
        subtotal_display=format_money(totals.subtotal, currency, locale),
        taxable_subtotal_display=format_money(totals.taxable_subtotal, currency, locale),
    )


def render_document(
    store: DocumentRecordStore,
    document_id: str,
    *,
    currency: str = "USD",
    locale: str = DEFAULT_LOCALE,
) -> DocumentView:
    started = time.perf_counter()
    try:
        line_items = store.list_line_items(document_id)
        groups = store.list_groups(document_id)
    except RecordStoreError:
        log_document_event(
            logger,
            logging.ERROR,
            "document_render_failed",
            document_id=document_id,
            stage="fetch",
            latency_ms=int((time.perf_counter() - started) * 1000),
            outcome="failure",
        )
        raise

    view = build_document_view(document_id, line_items, groups, currency=currency, locale=locale)
    log_document_event(
        logger,
        logging.INFO,
        "document_rendered",
        document_id=document_id,
        stage="render",
        latency_ms=int((time.perf_counter() - started) * 1000),
        outcome="success",
        item_count=view.item_count,
        section_count=len(view.sections),
    )
    return view
