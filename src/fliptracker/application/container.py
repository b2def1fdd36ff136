from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from fliptracker.repositories.sqlite_repo import SqliteRepository
from fliptracker.services.backup_service import BackupService
from fliptracker.services.capital_service import CapitalService
from fliptracker.services.inventory_service import InventoryService
from fliptracker.services.reporting_service import ReportingService
from fliptracker.services.sales_service import SalesService


@dataclass(frozen=True)
class AppContainer:
    repo: SqliteRepository
    inventory: InventoryService
    sales: SalesService
    capital: CapitalService
    reporting: ReportingService
    backup: BackupService


def build_container(db_path: Path | str, backup_dir: Path | str | None = None) -> AppContainer:
    repo = SqliteRepository(db_path)
    repo.init_db()

    return AppContainer(
        repo=repo,
        inventory=InventoryService(repo),
        sales=SalesService(repo),
        capital=CapitalService(repo),
        reporting=ReportingService(repo),
        backup=BackupService(repo, backup_dir or Path(db_path).parent / "backups"),
    )
