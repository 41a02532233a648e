from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    # Store rows carry extra columns we do not render; numeric columns are left
    # untyped so the engine can coerce whatever the store hands back.
    model_config = ConfigDict(frozen=True, extra="ignore")


class LineItem(_Record):
    id: str
    document_id: str
    group_id: str | None = None
    item_type: str | None = None
    title: str | None = None
    description: str | None = None
    qty: Any = None
    unit: str | None = None
    sort_order: Any = None
    labor_hours: Any = None
    labor_rate: Any = None
    taxable_labor: Any = None
    materials_cost: Any = None
    materials_markup_pct: Any = None
    taxable_materials: Any = None
    created_at: str | None = None


class Group(_Record):
    id: str
    document_id: str
    name: str | None = None
    title: str | None = None
    sort_order: Any = None


class PriceBookItem(_Record):
    id: str
    title: str | None = None
    description: str | None = None
    item_type: str | None = None
    pricing_mode: str | None = None
    default_qty: Any = None
    unit: str | None = None
    default_unit: str | None = None
    labor_rate: Any = None
    labor_hours: Any = None
    taxable_labor: Any = None
    materials_cost: Any = None
    materials_markup_pct: Any = None
    taxable_materials: Any = None
    created_at: str | None = None


class RenderedLine(BaseModel):
    id: str
    title: str | None = None
    description: str | None = None
    item_type: str | None = None
    unit: str | None = None
    qty: float
    labor_total: float
    materials_total: float
    line_total: float
    taxable_amount: float
    line_total_display: str


class RenderedSection(BaseModel):
    key: str
    label: str
    rows: list[RenderedLine] = Field(default_factory=list)
    subtotal: float
    subtotal_display: str


class DocumentView(BaseModel):
    document_id: str
    currency: str = Field(min_length=3, max_length=3)
    locale: str = "en_US"
    sections: list[RenderedSection] = Field(default_factory=list)
    item_count: int = Field(ge=0)
    subtotal: float
    taxable_subtotal: float
    subtotal_display: str
    taxable_subtotal_display: str
