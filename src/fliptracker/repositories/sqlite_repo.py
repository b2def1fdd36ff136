from __future__ import annotations

import shutil
import sqlite3
from datetime import datetime
from pathlib import Path

from fliptracker.domain.models import CapitalAdjustment, FinancialConfig, Product, Sale, Snapshot
from fliptracker.domain.numbers import as_decimal
from fliptracker.repositories.snapshot_codec import default_snapshot


LATEST_SCHEMA_VERSION = 2


class SqliteRepository:
    def __init__(self, db_path: Path | str):
        self.db_path = str(db_path)

    def _conn(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def init_db(self) -> None:
        self.run_migrations()

    def run_migrations(self) -> None:
        conn = self._conn()
        backup_path = self._create_pre_migration_backup()
        try:
            cur = conn.cursor()
            cur.execute("BEGIN")
            cur.execute("CREATE TABLE IF NOT EXISTS schema_migrations (version INTEGER PRIMARY KEY, applied_at TEXT NOT NULL)")
            cur.execute("SELECT COALESCE(MAX(version), 0) FROM schema_migrations")
            current_version = int(cur.fetchone()[0])

            migrations = [
                (1, self._migration_v1_base),
                (2, self._migration_v2_indexes),
            ]

            for version, migration in migrations:
                if version <= current_version:
                    continue
                migration(cur)
                cur.execute(
                    "INSERT INTO schema_migrations (version, applied_at) VALUES (?, datetime('now'))",
                    (version,),
                )
            conn.commit()
        except Exception as exc:
            conn.rollback()
            self._restore_pre_migration_backup(backup_path)
            raise RuntimeError(
                "Database migration failed. Original database restored from automatic backup."
            ) from exc
        finally:
            conn.close()

    def _create_pre_migration_backup(self) -> Path | None:
        db_file = Path(self.db_path)
        if not db_file.exists() or db_file.stat().st_size == 0:
            return None
        if self.schema_version() >= LATEST_SCHEMA_VERSION:
            return None
        backup_file = db_file.with_name(f"{db_file.stem}.pre_migration_{datetime.now().strftime('%Y%m%d%H%M%S')}.bak")
        shutil.copy2(db_file, backup_file)
        return backup_file

    def _restore_pre_migration_backup(self, backup_path: Path | None) -> None:
        if backup_path is None or not backup_path.exists():
            return
        shutil.copy2(backup_path, self.db_path)

    def _migration_v1_base(self, cur: sqlite3.Cursor) -> None:
        # money is kept as TEXT so Decimal values round-trip exactly
        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS financial_configs (
            user_id TEXT PRIMARY KEY,
            initial_capital TEXT NOT NULL,
            start_date TEXT NOT NULL,
            notes TEXT NOT NULL DEFAULT ''
        )
        """
        )

        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS products (
            user_id TEXT NOT NULL,
            position INTEGER NOT NULL,
            id TEXT NOT NULL,
            name TEXT NOT NULL,
            category TEXT NOT NULL DEFAULT '',
            purchase_date TEXT NOT NULL,
            unit_purchase_price TEXT NOT NULL,
            quantity_purchased INTEGER NOT NULL,
            supplier TEXT NOT NULL DEFAULT '',
            notes TEXT NOT NULL DEFAULT '',
            PRIMARY KEY (user_id, position)
        )
        """
        )

        # no foreign key to products: dangling references are tolerated when reading
        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS sales (
            user_id TEXT NOT NULL,
            position INTEGER NOT NULL,
            id TEXT NOT NULL,
            product_id TEXT NOT NULL,
            sale_date TEXT NOT NULL,
            quantity_sold INTEGER NOT NULL,
            unit_sale_price TEXT NOT NULL,
            customer TEXT NOT NULL DEFAULT '',
            notes TEXT NOT NULL DEFAULT '',
            PRIMARY KEY (user_id, position)
        )
        """
        )

        cur.execute(
            """
        CREATE TABLE IF NOT EXISTS capital_adjustments (
            user_id TEXT NOT NULL,
            position INTEGER NOT NULL,
            id TEXT NOT NULL,
            date TEXT NOT NULL,
            value TEXT NOT NULL,
            description TEXT NOT NULL,
            PRIMARY KEY (user_id, position)
        )
        """
        )

    def _migration_v2_indexes(self, cur: sqlite3.Cursor) -> None:
        cur.execute("CREATE INDEX IF NOT EXISTS idx_sales_product ON sales(user_id, product_id)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_products_id ON products(user_id, id)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_adjustments_id ON capital_adjustments(user_id, id)")

    def schema_version(self) -> int:
        conn = self._conn()
        cur = conn.cursor()
        try:
            cur.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='schema_migrations'")
            if cur.fetchone() is None:
                return 0
            cur.execute("SELECT COALESCE(MAX(version), 0) FROM schema_migrations")
            return int(cur.fetchone()[0])
        finally:
            conn.close()

    def integrity_check(self) -> str:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute("PRAGMA integrity_check")
        row = cur.fetchone()
        conn.close()
        return str(row[0]) if row else "unknown"

    # ---------- Snapshots ----------
    def user_ids(self) -> list[str]:
        conn = self._conn()
        cur = conn.cursor()
        cur.execute(
            """
            SELECT user_id FROM financial_configs
            UNION SELECT user_id FROM products
            UNION SELECT user_id FROM sales
            UNION SELECT user_id FROM capital_adjustments
            ORDER BY 1
            """
        )
        rows = cur.fetchall()
        conn.close()
        return [str(r[0]) for r in rows]

    def get(self, user_id: str) -> Snapshot:
        conn = self._conn()
        cur = conn.cursor()
        try:
            cur.execute(
                "SELECT initial_capital, start_date, notes FROM financial_configs WHERE user_id=?",
                (user_id,),
            )
            cfg_row = cur.fetchone()

            cur.execute(
                """
                SELECT id, name, category, purchase_date, unit_purchase_price, quantity_purchased, supplier, notes
                FROM products WHERE user_id=? ORDER BY position
                """,
                (user_id,),
            )
            products = tuple(
                Product(
                    id=str(r[0]),
                    name=str(r[1]),
                    category=str(r[2]),
                    purchase_date=str(r[3]),
                    unit_purchase_price=as_decimal(r[4]),
                    quantity_purchased=int(r[5]),
                    supplier=str(r[6]),
                    notes=str(r[7]),
                )
                for r in cur.fetchall()
            )

            cur.execute(
                """
                SELECT id, product_id, sale_date, quantity_sold, unit_sale_price, customer, notes
                FROM sales WHERE user_id=? ORDER BY position
                """,
                (user_id,),
            )
            sales = tuple(
                Sale(
                    id=str(r[0]),
                    product_id=str(r[1]),
                    sale_date=str(r[2]),
                    quantity_sold=int(r[3]),
                    unit_sale_price=as_decimal(r[4]),
                    customer=str(r[5]),
                    notes=str(r[6]),
                )
                for r in cur.fetchall()
            )

            cur.execute(
                "SELECT id, date, value, description FROM capital_adjustments WHERE user_id=? ORDER BY position",
                (user_id,),
            )
            adjustments = tuple(
                CapitalAdjustment(id=str(r[0]), date=str(r[1]), value=as_decimal(r[2]), description=str(r[3]))
                for r in cur.fetchall()
            )
        finally:
            conn.close()

        if cfg_row:
            config = FinancialConfig(initial_capital=as_decimal(cfg_row[0]), start_date=str(cfg_row[1]), notes=str(cfg_row[2]))
        else:
            config = default_snapshot().config
        return Snapshot(config=config, products=products, sales=sales, adjustments=adjustments)

    def put(self, user_id: str, snapshot: Snapshot) -> None:
        """Replace everything stored for ``user_id`` in one transaction."""
        conn = self._conn()
        cur = conn.cursor()
        try:
            for table in ("financial_configs", "products", "sales", "capital_adjustments"):
                cur.execute(f"DELETE FROM {table} WHERE user_id=?", (user_id,))

            cfg = snapshot.config
            cur.execute(
                "INSERT INTO financial_configs (user_id, initial_capital, start_date, notes) VALUES (?, ?, ?, ?)",
                (user_id, str(cfg.initial_capital), cfg.start_date, cfg.notes or ""),
            )

            cur.executemany(
                """
                INSERT INTO products (
                    user_id, position, id, name, category, purchase_date,
                    unit_purchase_price, quantity_purchased, supplier, notes
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        user_id, pos, p.id, p.name, p.category or "", p.purchase_date or "",
                        str(p.unit_purchase_price), int(p.quantity_purchased), p.supplier or "", p.notes or "",
                    )
                    for pos, p in enumerate(snapshot.products)
                ],
            )

            cur.executemany(
                """
                INSERT INTO sales (
                    user_id, position, id, product_id, sale_date,
                    quantity_sold, unit_sale_price, customer, notes
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        user_id, pos, s.id, s.product_id, s.sale_date or "",
                        int(s.quantity_sold), str(s.unit_sale_price), s.customer or "", s.notes or "",
                    )
                    for pos, s in enumerate(snapshot.sales)
                ],
            )

            cur.executemany(
                """
                INSERT INTO capital_adjustments (user_id, position, id, date, value, description)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (user_id, pos, a.id, a.date or "", str(a.value), a.description or "")
                    for pos, a in enumerate(snapshot.adjustments)
                ],
            )

            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
