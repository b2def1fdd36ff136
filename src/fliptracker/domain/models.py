from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Optional

PURCHASE = "PURCHASE"
SALE = "SALE"
ADJUSTMENT = "ADJUSTMENT"

MOVEMENT_KINDS = (PURCHASE, SALE, ADJUSTMENT)


@dataclass(frozen=True)
class FinancialConfig:
    initial_capital: Decimal = Decimal("0")
    start_date: str = ""
    notes: str = ""


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    purchase_date: str
    unit_purchase_price: Decimal
    quantity_purchased: int
    category: str = ""
    supplier: str = ""
    notes: str = ""


@dataclass(frozen=True)
class Sale:
    id: str
    product_id: str
    sale_date: str
    quantity_sold: int
    unit_sale_price: Decimal
    customer: str = ""
    notes: str = ""


@dataclass(frozen=True)
class CapitalAdjustment:
    id: str
    date: str
    value: Decimal
    description: str


@dataclass(frozen=True)
class Movement:
    kind: str
    date: str
    value: Decimal
    description: str


@dataclass(frozen=True)
class Totals:
    movements: tuple[Movement, ...]
    current_capital: Decimal
    total_purchases: Decimal
    total_sales: Decimal
    profit: Decimal
    inventory_value: Decimal


@dataclass(frozen=True)
class CapitalSeries:
    labels: tuple[str, ...]
    values: tuple[Decimal, ...]

    def points(self) -> list[tuple[str, Decimal]]:
        return list(zip(self.labels, self.values))


@dataclass(frozen=True)
class ProductReport:
    product_id: str
    name: str
    total_cost: Decimal
    total_sales: Decimal
    profit: Decimal
    margin_pct: Decimal
    roi_pct: Decimal
    stock: int
    status: str


@dataclass(frozen=True)
class Snapshot:
    """Everything one user has recorded. Replaced, never mutated."""

    config: FinancialConfig = field(default_factory=FinancialConfig)
    products: tuple[Product, ...] = ()
    sales: tuple[Sale, ...] = ()
    adjustments: tuple[CapitalAdjustment, ...] = ()

    def product_by_id(self, product_id: str) -> Optional[Product]:
        for p in self.products:
            if p.id == product_id:
                return p
        return None

    def adjustment_by_id(self, adjustment_id: str) -> Optional[CapitalAdjustment]:
        for a in self.adjustments:
            if a.id == adjustment_id:
                return a
        return None

    def with_config(self, config: FinancialConfig) -> "Snapshot":
        return replace(self, config=config)

    def with_product(self, product: Product) -> "Snapshot":
        return replace(self, products=self.products + (product,))

    def with_sale(self, sale: Sale) -> "Snapshot":
        return replace(self, sales=self.sales + (sale,))

    def with_adjustments(self, adjustments) -> "Snapshot":
        return replace(self, adjustments=tuple(adjustments))
