from .models import (
    ADJUSTMENT,
    PURCHASE,
    SALE,
    CapitalAdjustment,
    CapitalSeries,
    FinancialConfig,
    Movement,
    Product,
    ProductReport,
    Sale,
    Snapshot,
    Totals,
)
from .errors import AppError, ValidationError, InvalidNumberError, NotFoundError, InsufficientStockError
from .ledger import (
    build_capital_series,
    build_movements,
    capital_variation_pct,
    compute_totals,
    product_reports,
    stock_levels,
    stock_of,
)

__all__ = [
    "ADJUSTMENT",
    "PURCHASE",
    "SALE",
    "CapitalAdjustment",
    "CapitalSeries",
    "FinancialConfig",
    "Movement",
    "Product",
    "ProductReport",
    "Sale",
    "Snapshot",
    "Totals",
    "AppError",
    "ValidationError",
    "InvalidNumberError",
    "NotFoundError",
    "InsufficientStockError",
    "build_capital_series",
    "build_movements",
    "capital_variation_pct",
    "compute_totals",
    "product_reports",
    "stock_levels",
    "stock_of",
]
