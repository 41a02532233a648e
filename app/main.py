from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import TextIO

from app.config import Settings, load_dotenv
from app.logger import configure_logging, log_document_event
from app.price_book import filter_price_book, line_item_from_price_book, next_sort_order
from app.record_store import DocumentRecordStore, RecordStoreError, SqliteRecordStore
from app.rendering import render_document
from schemas.document_schema import DocumentView

logger = logging.getLogger(__name__)


def format_view_text(view: DocumentView) -> str:
    lines: list[str] = [f"Document {view.document_id}"]
    for section in view.sections:
        lines.append("")
        lines.append(section.label)
        for row in section.rows:
            title = row.title or "(no title)"
            unit = f" {row.unit}" if row.unit else ""
            lines.append(f"  {title:<40} qty {row.qty:g}{unit:<8} {row.line_total_display:>14}")
        lines.append(f"  {'Section subtotal':<54} {section.subtotal_display:>14}")
    lines.append("")
    lines.append(f"{'Subtotal':<56} {view.subtotal_display:>14}")
    lines.append(f"{'Taxable subtotal':<56} {view.taxable_subtotal_display:>14}")
    return "\n".join(lines)


def run_render(
    store: DocumentRecordStore,
    document_id: str,
    *,
    currency: str,
    locale: str,
    output_format: str,
    out: TextIO,
) -> int:
    view = render_document(store, document_id, currency=currency, locale=locale)
    if output_format == "text":
        out.write(format_view_text(view) + "\n")
    else:
        out.write(json.dumps(view.model_dump(), indent=2) + "\n")
    return 0


def run_price_book(store: DocumentRecordStore, query: str | None, *, out: TextIO) -> int:
    items = filter_price_book(store.list_price_book(), query)
    out.write(json.dumps([item.model_dump() for item in items], indent=2) + "\n")
    return 0


def run_add_item(
    store: DocumentRecordStore,
    document_id: str,
    price_book_item_id: str,
    *,
    group_id: str | None,
    out: TextIO,
) -> int:
    source = store.get_price_book_item(price_book_item_id)
    item = line_item_from_price_book(
        source,
        document_id,
        sort_order=next_sort_order(store.list_line_items(document_id)),
        group_id=group_id,
    )
    store.add_line_item(item)
    log_document_event(
        logger,
        logging.INFO,
        "line_item_added",
        document_id=document_id,
        stage="price_book",
        outcome="success",
    )
    out.write(json.dumps(item.model_dump(), indent=2) + "\n")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Field service cost documents")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Render a document's sections and totals")
    render.add_argument("document_id")
    render.add_argument("--format", dest="output_format", default="json", choices=["json", "text"])

    price_book = subparsers.add_parser("price-book", help="Search the price book")
    price_book.add_argument("--query", default=None)

    add_item = subparsers.add_parser("add-item", help="Copy a price book item onto a document")
    add_item.add_argument("document_id")
    add_item.add_argument("price_book_item_id")
    add_item.add_argument("--group-id", default=None)
    return parser


def main(argv: list[str] | None = None, *, store: DocumentRecordStore | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    load_dotenv()
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1
    configure_logging(settings.log_level)

    try:
        active_store = store or SqliteRecordStore(db_path=settings.record_db_path)
        if args.command == "render":
            return run_render(
                active_store,
                args.document_id,
                currency=settings.currency,
                locale=settings.locale,
                output_format=args.output_format,
                out=sys.stdout,
            )
        if args.command == "price-book":
            return run_price_book(active_store, args.query, out=sys.stdout)
        if args.command == "add-item":
            return run_add_item(
                active_store,
                args.document_id,
                args.price_book_item_id,
                group_id=args.group_id,
                out=sys.stdout,
            )
    except RecordStoreError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
