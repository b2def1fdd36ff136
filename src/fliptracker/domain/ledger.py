"""Financial derivations over a user's snapshot.

Every function here is pure: it reads the snapshot it is given, never keeps a
reference to it, and never raises on malformed numbers (they count as zero).
Dates are ISO ``YYYY-MM-DD`` strings, so sorting the strings sorts the dates.
"""
from __future__ import annotations

from collections import Counter
from decimal import Decimal
from typing import Iterable, Optional

from fliptracker.domain.models import (
    ADJUSTMENT,
    PURCHASE,
    SALE,
    CapitalSeries,
    Movement,
    Product,
    ProductReport,
    Sale,
    Snapshot,
    Totals,
)
from fliptracker.domain.numbers import ZERO, as_decimal, as_int, today_iso

UNKNOWN_PRODUCT = "N/A"
DEFAULT_ADJUSTMENT_DESCRIPTION = "Capital adjustment"

STATUS_IN_STOCK = "in_stock"
STATUS_PARTIAL = "partial"
STATUS_SOLD = "sold"


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def sold_quantities(sales: Iterable[Sale]) -> Counter[str]:
    sold: Counter[str] = Counter()
    for s in sales:
        sold[s.product_id] += as_int(s.quantity_sold)
    return sold


def _products_by_id(products: Iterable[Product]) -> dict[str, Product]:
    out: dict[str, Product] = {}
    for p in products:
        out.setdefault(p.id, p)
    return out


def stock_of(product_id: str, snapshot: Snapshot, sold: Optional[Counter[str]] = None) -> int:
    """Remaining unsold quantity. Unknown products have no stock.

    Not clamped at zero: if the data implies oversold stock, that is reported.
    """
    return stock_levels(snapshot, sold).get(product_id, 0)


def stock_levels(snapshot: Snapshot, sold: Optional[Counter[str]] = None) -> dict[str, int]:
    """Stock per product id in one pass. A duplicated id resolves to its first product."""
    if sold is None:
        sold = sold_quantities(snapshot.sales)
    return {pid: as_int(p.quantity_purchased) - sold[pid] for pid, p in _products_by_id(snapshot.products).items()}


def build_movements(snapshot: Snapshot, today: Optional[str] = None) -> tuple[Movement, ...]:
    today = today or today_iso()
    products = _products_by_id(snapshot.products)
    movements: list[Movement] = []

    for p in snapshot.products:
        qty = as_int(p.quantity_purchased)
        price = as_decimal(p.unit_purchase_price)
        total = qty * price
        if total > 0:
            movements.append(
                Movement(
                    kind=PURCHASE,
                    date=p.purchase_date or today,
                    value=-total,
                    description=f"Purchase of {p.name} ({qty} x {_money(price)})",
                )
            )

    for s in snapshot.sales:
        qty = as_int(s.quantity_sold)
        price = as_decimal(s.unit_sale_price)
        total = qty * price
        if total > 0:
            product = products.get(s.product_id)
            name = product.name if product and product.name else UNKNOWN_PRODUCT
            movements.append(
                Movement(
                    kind=SALE,
                    date=s.sale_date or today,
                    value=total,
                    description=f"Sale of {name} ({qty} x {_money(price)})",
                )
            )

    for a in snapshot.adjustments:
        movements.append(
            Movement(
                kind=ADJUSTMENT,
                date=a.date or today,
                value=as_decimal(a.value),
                description=a.description or DEFAULT_ADJUSTMENT_DESCRIPTION,
            )
        )

    # sorted() is stable: same-date movements keep purchase, sale, adjustment order
    return tuple(sorted(movements, key=lambda m: m.date))


def inventory_value(snapshot: Snapshot, sold: Optional[Counter[str]] = None) -> Decimal:
    if sold is None:
        sold = sold_quantities(snapshot.sales)
    total = ZERO
    for p in snapshot.products:
        total += (as_int(p.quantity_purchased) - sold[p.id]) * as_decimal(p.unit_purchase_price)
    return total


def compute_totals(snapshot: Snapshot, today: Optional[str] = None) -> Totals:
    movements = build_movements(snapshot, today=today)
    initial = as_decimal(snapshot.config.initial_capital)

    capital = initial
    total_purchases = ZERO
    total_sales = ZERO
    for m in movements:
        if m.kind == PURCHASE:
            total_purchases += -m.value
        elif m.kind == SALE:
            total_sales += m.value
        capital += m.value

    return Totals(
        movements=movements,
        current_capital=capital,
        total_purchases=total_purchases,
        total_sales=total_sales,
        profit=capital - initial,
        inventory_value=inventory_value(snapshot),
    )


def capital_variation_pct(initial_capital: object, profit: Decimal) -> Decimal:
    """Profit as a percentage of the initial capital, 0 when there is no initial capital."""
    initial = as_decimal(initial_capital)
    if not initial:
        return ZERO
    return profit / initial * 100


def build_capital_series(snapshot: Snapshot, today: Optional[str] = None) -> CapitalSeries:
    today = today or today_iso()
    capital = as_decimal(snapshot.config.initial_capital)
    labels = [snapshot.config.start_date or today]
    values = [capital]
    for m in build_movements(snapshot, today=today):
        capital += m.value
        labels.append(m.date)
        values.append(capital)
    return CapitalSeries(labels=tuple(labels), values=tuple(values))


def product_reports(snapshot: Snapshot) -> list[ProductReport]:
    sold = sold_quantities(snapshot.sales)
    revenue: dict[str, Decimal] = {}
    for s in snapshot.sales:
        revenue[s.product_id] = revenue.get(s.product_id, ZERO) + as_int(s.quantity_sold) * as_decimal(s.unit_sale_price)

    out: list[ProductReport] = []
    for p in snapshot.products:
        purchased = as_int(p.quantity_purchased)
        total_cost = purchased * as_decimal(p.unit_purchase_price)
        total_sales = revenue.get(p.id, ZERO)
        profit = total_sales - total_cost
        margin = profit / total_sales * 100 if total_sales > 0 else ZERO
        roi = profit / total_cost * 100 if total_cost > 0 else ZERO
        stock = purchased - sold[p.id]
        if stock <= 0:
            status = STATUS_SOLD
        elif stock < purchased:
            status = STATUS_PARTIAL
        else:
            status = STATUS_IN_STOCK
        out.append(
            ProductReport(
                product_id=p.id,
                name=p.name,
                total_cost=total_cost,
                total_sales=total_sales,
                profit=profit,
                margin_pct=margin,
                roi_pct=roi,
                stock=stock,
                status=status,
            )
        )
    return out
