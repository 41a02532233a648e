from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from app.logger import log_document_event
from app.money import DEFAULT_LOCALE, parse_locale
from app.price_book import filter_price_book, line_item_from_price_book, next_sort_order
from app.record_store import DocumentRecordStore, RecordNotFoundError, RecordStoreError
from app.rendering import render_document
from schemas.document_schema import DocumentView

logger = logging.getLogger(__name__)


class AddFromPriceBookRequest(BaseModel):
    price_book_item_id: str = Field(min_length=1)
    group_id: str | None = None


def create_document_app(
    store: DocumentRecordStore,
    *,
    currency: str = "USD",
    locale: str = DEFAULT_LOCALE,
) -> FastAPI:
    app = FastAPI(title="Field Service Documents API", version="0.1.0")
    default_locale = locale

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/documents/{document_id}/view", response_model=DocumentView)
    def document_view(document_id: str, locale: str | None = None) -> DocumentView:
        try:
            active_locale = parse_locale(locale) if locale else default_locale
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        try:
            return render_document(store, document_id, currency=currency, locale=active_locale)
        except RecordStoreError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc

    @app.get("/price-book")
    def price_book(q: str = "") -> dict[str, Any]:
        try:
            items = filter_price_book(store.list_price_book(), q)
        except RecordStoreError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return {"count": len(items), "items": [item.model_dump() for item in items]}

    @app.post("/documents/{document_id}/add-from-price-book")
    def add_from_price_book(document_id: str, body: AddFromPriceBookRequest) -> dict[str, Any]:
        try:
            source = store.get_price_book_item(body.price_book_item_id)
            existing = store.list_line_items(document_id)
            item = line_item_from_price_book(
                source,
                document_id,
                sort_order=next_sort_order(existing),
                group_id=body.group_id,
            )
            store.add_line_item(item)
        except RecordNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except RecordStoreError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc

        log_document_event(
            logger,
            logging.INFO,
            "line_item_added",
            document_id=document_id,
            stage="price_book",
            outcome="success",
        )
        return {"item": item.model_dump()}

    return app
