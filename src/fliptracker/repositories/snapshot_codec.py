from __future__ import annotations

from typing import Any, Optional

from fliptracker.domain.models import CapitalAdjustment, FinancialConfig, Product, Sale, Snapshot
from fliptracker.domain.numbers import as_decimal, as_int, today_iso


def default_snapshot(today: Optional[str] = None) -> Snapshot:
    return Snapshot(config=FinancialConfig(start_date=today or today_iso()))


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _rows(data: dict, key: str) -> list[dict]:
    rows = data.get(key) or []
    if not isinstance(rows, list):
        return []
    return [r for r in rows if isinstance(r, dict)]


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    """JSON-ready dict. Money is written as strings so no precision is lost."""
    cfg = snapshot.config
    return {
        "configuration": {
            "initial_capital": str(cfg.initial_capital),
            "start_date": cfg.start_date,
            "notes": cfg.notes,
        },
        "products": [
            {
                "id": p.id,
                "name": p.name,
                "category": p.category,
                "purchase_date": p.purchase_date,
                "unit_purchase_price": str(p.unit_purchase_price),
                "quantity_purchased": p.quantity_purchased,
                "supplier": p.supplier,
                "notes": p.notes,
            }
            for p in snapshot.products
        ],
        "sales": [
            {
                "id": s.id,
                "product_id": s.product_id,
                "sale_date": s.sale_date,
                "quantity_sold": s.quantity_sold,
                "unit_sale_price": str(s.unit_sale_price),
                "customer": s.customer,
                "notes": s.notes,
            }
            for s in snapshot.sales
        ],
        "adjustments": [
            {
                "id": a.id,
                "date": a.date,
                "value": str(a.value),
                "description": a.description,
            }
            for a in snapshot.adjustments
        ],
    }


def snapshot_from_dict(data: dict, today: Optional[str] = None) -> Snapshot:
    """Lenient inverse of snapshot_to_dict: missing keys fall back to defaults."""
    default = default_snapshot(today)
    raw_cfg = data.get("configuration")
    if isinstance(raw_cfg, dict):
        config = FinancialConfig(
            initial_capital=as_decimal(raw_cfg.get("initial_capital")),
            start_date=_text(raw_cfg.get("start_date")) or default.config.start_date,
            notes=_text(raw_cfg.get("notes")),
        )
    else:
        config = default.config

    products = tuple(
        Product(
            id=_text(r.get("id")),
            name=_text(r.get("name")),
            category=_text(r.get("category")),
            purchase_date=_text(r.get("purchase_date")),
            unit_purchase_price=as_decimal(r.get("unit_purchase_price")),
            quantity_purchased=as_int(r.get("quantity_purchased")),
            supplier=_text(r.get("supplier")),
            notes=_text(r.get("notes")),
        )
        for r in _rows(data, "products")
    )
    sales = tuple(
        Sale(
            id=_text(r.get("id")),
            product_id=_text(r.get("product_id")),
            sale_date=_text(r.get("sale_date")),
            quantity_sold=as_int(r.get("quantity_sold")),
            unit_sale_price=as_decimal(r.get("unit_sale_price")),
            customer=_text(r.get("customer")),
            notes=_text(r.get("notes")),
        )
        for r in _rows(data, "sales")
    )
    adjustments = tuple(
        CapitalAdjustment(
            id=_text(r.get("id")),
            date=_text(r.get("date")),
            value=as_decimal(r.get("value")),
            description=_text(r.get("description")),
        )
        for r in _rows(data, "adjustments")
    )
    return Snapshot(config=config, products=products, sales=sales, adjustments=adjustments)
