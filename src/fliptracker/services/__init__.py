from .inventory_service import InventoryService
from .sales_service import SalesService
from .capital_service import CapitalService
from .reporting_service import ReportingService
from .backup_service import BackupService

__all__ = [
    "InventoryService",
    "SalesService",
    "CapitalService",
    "ReportingService",
    "BackupService",
]
