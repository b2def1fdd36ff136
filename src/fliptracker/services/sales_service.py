from __future__ import annotations

import logging
from typing import Callable

from fliptracker.domain.errors import InsufficientStockError, NotFoundError, ValidationError
from fliptracker.domain.ledger import UNKNOWN_PRODUCT, stock_of
from fliptracker.domain.models import Sale
from fliptracker.domain.numbers import parse_iso_date, parse_number, parse_quantity
from fliptracker.repositories.contracts import SnapshotRepository
from fliptracker.repositories.unit_of_work import SnapshotUnitOfWork
from fliptracker.services.ids import new_id

log = logging.getLogger("fliptracker.sales")


class SalesService:
    def __init__(
        self,
        repo: SnapshotRepository,
        id_factory: Callable[[str], str] | None = None,
        uow_factory: Callable[[str], SnapshotUnitOfWork] | None = None,
    ):
        self.repo = repo
        self.id_factory = id_factory or new_id
        self.uow_factory = uow_factory or (lambda user_id: SnapshotUnitOfWork(repo, user_id))

    def create_sale(
        self,
        user_id: str,
        product_id: str,
        quantity_sold,
        unit_sale_price,
        sale_date=None,
        customer: str = "",
        notes: str = "",
    ) -> Sale:
        product_id = (product_id or "").strip()
        if not product_id:
            raise ValidationError("Product is required.")
        qty = parse_quantity(quantity_sold, "Quantity")
        price = parse_number(unit_sale_price, "Sale price")
        if qty <= 0:
            raise ValidationError("Quantity must be > 0.")
        if price <= 0:
            raise ValidationError("Sale price must be > 0.")
        day = parse_iso_date(sale_date, "Sale date")

        with self.uow_factory(user_id) as uow:
            snapshot = uow.snapshot
            if snapshot.product_by_id(product_id) is None:
                raise NotFoundError("Product not found.")
            available = stock_of(product_id, snapshot)
            if qty > available:
                raise InsufficientStockError(f"Quantity ({qty}) exceeds stock ({available}).")

            sale = Sale(
                id=self.id_factory("s"),
                product_id=product_id,
                sale_date=day,
                quantity_sold=qty,
                unit_sale_price=price,
                customer=(customer or "").strip(),
                notes=(notes or "").strip(),
            )
            uow.replace(snapshot.with_sale(sale))
        log.info("sale_created user=%s sale_id=%s product_id=%s qty=%s unit_price=%s", user_id, sale.id, product_id, qty, price)
        return sale

    def list_sales(self, user_id: str) -> list[tuple[Sale, str]]:
        """Sales with the name of the product they reference, ``N/A`` when it is gone."""
        snapshot = self.repo.get(user_id)
        names = {}
        for p in snapshot.products:
            names.setdefault(p.id, p.name)
        return [(s, names.get(s.product_id) or UNKNOWN_PRODUCT) for s in snapshot.sales]
