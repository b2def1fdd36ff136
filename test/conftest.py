import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def scenario_snapshot(with_sale: bool = True, with_adjustment: bool = False):
    """Capital 1000, 10 units bought at 50, optionally 4 sold at 80 and a +200 adjustment."""
    from fliptracker.domain.models import CapitalAdjustment, FinancialConfig, Product, Sale, Snapshot

    snapshot = Snapshot(
        config=FinancialConfig(initial_capital=Decimal("1000"), start_date="2023-12-31"),
        products=(
            Product(
                id="p1",
                name="Sneakers",
                purchase_date="2024-01-01",
                unit_purchase_price=Decimal("50"),
                quantity_purchased=10,
            ),
        ),
    )
    if with_sale:
        snapshot = snapshot.with_sale(
            Sale(id="s1", product_id="p1", sale_date="2024-02-01", quantity_sold=4, unit_sale_price=Decimal("80"))
        )
    if with_adjustment:
        snapshot = snapshot.with_adjustments(
            [CapitalAdjustment(id="a1", date="2024-03-01", value=Decimal("200"), description="aporte")]
        )
    return snapshot
