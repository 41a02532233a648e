from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Protocol

from pydantic import ValidationError

from schemas.document_schema import Group, LineItem, PriceBookItem


class RecordStoreError(RuntimeError):
    pass


class RecordNotFoundError(RecordStoreError):
    pass


class DocumentRecordStore(Protocol):
    def list_line_items(self, document_id: str) -> list[LineItem]:
        """Return the document's line items in insertion order."""

    def list_groups(self, document_id: str) -> list[Group]:
        """Return the document's groups in insertion order."""

    def list_price_book(self) -> list[PriceBookItem]:
        """Return every price book item."""

    def get_price_book_item(self, item_id: str) -> PriceBookItem:
        """Return one price book item or raise RecordNotFoundError."""

    def add_line_item(self, item: LineItem) -> LineItem:
        """Persist a new line item and return it."""


_LINE_ITEM_COLUMNS = tuple(LineItem.model_fields)
_GROUP_COLUMNS = tuple(Group.model_fields)
_PRICE_BOOK_COLUMNS = tuple(PriceBookItem.model_fields)
_BOOL_COLUMNS = {"taxable_labor", "taxable_materials"}

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS line_items (
        id TEXT PRIMARY KEY,
        document_id TEXT NOT NULL,
        group_id TEXT,
        item_type TEXT,
        title TEXT,
        description TEXT,
        qty REAL,
        unit TEXT,
        sort_order INTEGER,
        labor_hours REAL,
        labor_rate REAL,
        taxable_labor INTEGER,
        materials_cost REAL,
        materials_markup_pct REAL,
        taxable_materials INTEGER,
        created_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_line_items_document ON line_items (document_id)",
    """
    CREATE TABLE IF NOT EXISTS line_item_groups (
        id TEXT PRIMARY KEY,
        document_id TEXT NOT NULL,
        name TEXT,
        title TEXT,
        sort_order INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS price_book_items (
        id TEXT PRIMARY KEY,
        title TEXT,
        description TEXT,
        item_type TEXT,
        pricing_mode TEXT,
        default_qty REAL,
        unit TEXT,
        default_unit TEXT,
        labor_rate REAL,
        labor_hours REAL,
        taxable_labor INTEGER,
        materials_cost REAL,
        materials_markup_pct REAL,
        taxable_materials INTEGER,
        created_at TEXT
    )
    """,
)


def _from_row(row: sqlite3.Row) -> dict[str, Any]:
    data = dict(row)
    for name in _BOOL_COLUMNS & data.keys():
        if data[name] is not None:
            data[name] = bool(data[name])
    return data


def _to_params(record: Any, columns: tuple[str, ...]) -> tuple[Any, ...]:
    values = []
    for name in columns:
        value = getattr(record, name)
        if name in _BOOL_COLUMNS and value is not None:
            value = 1 if value else 0
        values.append(value)
    return tuple(values)


class SqliteRecordStore:
    def __init__(self, db_path: str | Path = "data/records.db") -> None:
        self._db_path = str(db_path)
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=10, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise RecordStoreError(f"Cannot open record store {self._db_path}: {exc}") from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            raise RecordStoreError(f"Record store query failed: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._session() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)

    def _select(self, table: str, columns: tuple[str, ...], where: str, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        sql = f"SELECT {', '.join(columns)} FROM {table} {where} ORDER BY rowid"
        with self._session() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_from_row(row) for row in rows]

    def _insert(self, table: str, columns: tuple[str, ...], record: Any) -> None:
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        with self._session() as conn:
            try:
                conn.execute(sql, _to_params(record, columns))
            except sqlite3.IntegrityError as exc:
                raise RecordStoreError(f"Cannot insert {table} row {record.id}: {exc}") from exc

    @staticmethod
    def _validate(model: Any, rows: list[dict[str, Any]]) -> list[Any]:
        try:
            return [model.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise RecordStoreError(f"Malformed {model.__name__} row: {exc}") from exc

    def list_line_items(self, document_id: str) -> list[LineItem]:
        rows = self._select("line_items", _LINE_ITEM_COLUMNS, "WHERE document_id = ?", (document_id,))
        return self._validate(LineItem, rows)

    def list_groups(self, document_id: str) -> list[Group]:
        rows = self._select("line_item_groups", _GROUP_COLUMNS, "WHERE document_id = ?", (document_id,))
        return self._validate(Group, rows)

    def list_price_book(self) -> list[PriceBookItem]:
        rows = self._select("price_book_items", _PRICE_BOOK_COLUMNS, "", ())
        return self._validate(PriceBookItem, rows)

    def get_price_book_item(self, item_id: str) -> PriceBookItem:
        rows = self._select("price_book_items", _PRICE_BOOK_COLUMNS, "WHERE id = ?", (item_id,))
        if not rows:
            raise RecordNotFoundError(f"Price book item not found: {item_id}")
        return self._validate(PriceBookItem, rows)[0]

    def add_line_item(self, item: LineItem) -> LineItem:
        self._insert("line_items", _LINE_ITEM_COLUMNS, item)
        return item

    def add_group(self, group: Group) -> Group:
        self._insert("line_item_groups", _GROUP_COLUMNS, group)
        return group

    def add_price_book_item(self, item: PriceBookItem) -> PriceBookItem:
        self._insert("price_book_items", _PRICE_BOOK_COLUMNS, item)
        return item
