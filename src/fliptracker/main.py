from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from fliptracker import __version__
from fliptracker.application.container import AppContainer, build_container
from fliptracker.config import default_user_id, get_app_paths
from fliptracker.domain.errors import AppError
from fliptracker.domain.ledger import capital_variation_pct
from fliptracker.logging_config import setup_logging

log = logging.getLogger(__name__)


def _fmt(value) -> str:
    return f"{value:.2f}"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fliptracker", description="Purchases, sales and capital for resale businesses.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--db", type=Path, default=None, help="sqlite database file (default: per-user app directory)")
    parser.add_argument("--user", default=None, help="user id whose records are used (default: $FLIPTRACKER_USER or 'local')")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("summary", help="current capital, totals and inventory value")
    sub.add_parser("products", help="products with remaining stock")
    sub.add_parser("sales", help="registered sales")
    sub.add_parser("movements", help="chronological ledger of movements")
    sub.add_parser("series", help="capital over time")
    sub.add_parser("adjustments", help="manual capital adjustments")

    p = sub.add_parser("add-product", help="register a purchase")
    p.add_argument("name")
    p.add_argument("--price", required=True, help="unit purchase price")
    p.add_argument("--qty", required=True, help="quantity purchased")
    p.add_argument("--date", default=None, help="purchase date YYYY-MM-DD (default: today)")
    p.add_argument("--category", default="")
    p.add_argument("--supplier", default="")
    p.add_argument("--notes", default="")

    p = sub.add_parser("add-sale", help="register a sale")
    p.add_argument("product_id")
    p.add_argument("--price", required=True, help="unit sale price")
    p.add_argument("--qty", required=True, help="quantity sold")
    p.add_argument("--date", default=None, help="sale date YYYY-MM-DD (default: today)")
    p.add_argument("--customer", default="")
    p.add_argument("--notes", default="")

    p = sub.add_parser("configure", help="set initial capital and start date")
    p.add_argument("--capital", required=True)
    p.add_argument("--start-date", default=None)
    p.add_argument("--notes", default="")

    p = sub.add_parser("adjust", help="add a capital adjustment")
    p.add_argument("value")
    p.add_argument("description")
    p.add_argument("--date", default=None)

    p = sub.add_parser("update-adjustment", help="replace a capital adjustment")
    p.add_argument("adjustment_id")
    p.add_argument("value")
    p.add_argument("description")
    p.add_argument("--date", default=None)

    p = sub.add_parser("delete-adjustment", help="remove a capital adjustment")
    p.add_argument("adjustment_id")

    p = sub.add_parser("export-excel", help="write an Excel report")
    p.add_argument("path", type=Path)

    p = sub.add_parser("export-csv", help="write movements or products as CSV")
    p.add_argument("kind", choices=["movements", "products"])
    p.add_argument("path", type=Path)

    p = sub.add_parser("backup", help="write a JSON backup (to PATH, or to the backup directory)")
    p.add_argument("path", type=Path, nargs="?", default=None)

    p = sub.add_parser("restore", help="replace all records with a JSON backup")
    p.add_argument("path", type=Path)

    return parser


def _run(app: AppContainer, user: str, args: argparse.Namespace) -> None:
    cmd = args.command

    if cmd == "summary":
        cfg = app.capital.get_config(user)
        t = app.reporting.totals(user)
        print(f"Initial capital:  {_fmt(cfg.initial_capital)} (since {cfg.start_date})")
        print(f"Current capital:  {_fmt(t.current_capital)}")
        print(f"Total purchases:  {_fmt(t.total_purchases)}")
        print(f"Total sales:      {_fmt(t.total_sales)}")
        print(f"Profit:           {_fmt(t.profit)}")
        print(f"Variation:        {_fmt(capital_variation_pct(cfg.initial_capital, t.profit))}%")
        print(f"Inventory value:  {_fmt(t.inventory_value)}")
    elif cmd == "products":
        for p, stock in app.inventory.list_products(user):
            print(f"{p.id}\t{p.purchase_date}\t{p.name}\t{p.quantity_purchased} x {_fmt(p.unit_purchase_price)}\tstock={stock}")
    elif cmd == "sales":
        for s, name in app.sales.list_sales(user):
            print(f"{s.id}\t{s.sale_date}\t{name}\t{s.quantity_sold} x {_fmt(s.unit_sale_price)}")
    elif cmd == "movements":
        for m in app.reporting.totals(user).movements:
            print(f"{m.date}\t{m.kind}\t{_fmt(m.value)}\t{m.description}")
    elif cmd == "series":
        for label, value in app.reporting.capital_series(user).points():
            print(f"{label}\t{_fmt(value)}")
    elif cmd == "adjustments":
        for a in app.capital.list_adjustments(user):
            print(f"{a.id}\t{a.date}\t{_fmt(a.value)}\t{a.description}")
    elif cmd == "add-product":
        p = app.inventory.add_product(
            user, args.name, args.price, args.qty,
            purchase_date=args.date, category=args.category, supplier=args.supplier, notes=args.notes,
        )
        print(p.id)
    elif cmd == "add-sale":
        s = app.sales.create_sale(
            user, args.product_id, args.qty, args.price,
            sale_date=args.date, customer=args.customer, notes=args.notes,
        )
        print(s.id)
    elif cmd == "configure":
        cfg = app.capital.configure(user, args.capital, start_date=args.start_date, notes=args.notes)
        print(f"Initial capital {_fmt(cfg.initial_capital)} since {cfg.start_date}")
    elif cmd == "adjust":
        a = app.capital.add_adjustment(user, args.value, args.description, date=args.date)
        print(a.id)
    elif cmd == "update-adjustment":
        app.capital.update_adjustment(user, args.adjustment_id, args.value, args.description, date=args.date)
    elif cmd == "delete-adjustment":
        app.capital.delete_adjustment(user, args.adjustment_id)
    elif cmd == "export-excel":
        app.reporting.export_report_excel(user, args.path)
        print(args.path)
    elif cmd == "export-csv":
        if args.kind == "movements":
            app.reporting.export_movements_csv(user, args.path)
        else:
            app.reporting.export_products_csv(user, args.path)
        print(args.path)
    elif cmd == "backup":
        target = app.backup.export_json(user, args.path) if args.path else app.backup.create_backup(user)
        print(target)
    elif cmd == "restore":
        snapshot = app.backup.import_json(user, args.path)
        print(f"Restored {len(snapshot.products)} products, {len(snapshot.sales)} sales, {len(snapshot.adjustments)} adjustments")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.db is None:
        paths = get_app_paths()
        db_path, logs_dir, backup_dir = paths.db_path, paths.logs_dir, paths.backup_dir
    else:
        db_path = args.db
        logs_dir = db_path.parent / "logs"
        backup_dir = db_path.parent / "backups"
    setup_logging(logs_dir, level=logging.INFO)

    app = build_container(db_path, backup_dir=backup_dir)
    user = args.user or default_user_id()
    try:
        _run(app, user, args)
    except AppError as e:
        log.warning("command_rejected command=%s error=%s", args.command, e)
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
