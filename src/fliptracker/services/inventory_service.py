from __future__ import annotations

import logging
from typing import Callable

from fliptracker.domain.errors import NotFoundError, ValidationError
from fliptracker.domain.ledger import stock_levels, stock_of
from fliptracker.domain.models import Product
from fliptracker.domain.numbers import parse_iso_date, parse_number, parse_quantity
from fliptracker.repositories.contracts import SnapshotRepository
from fliptracker.repositories.unit_of_work import SnapshotUnitOfWork
from fliptracker.services.ids import new_id

log = logging.getLogger(__name__)


class InventoryService:
    def __init__(
        self,
        repo: SnapshotRepository,
        id_factory: Callable[[str], str] | None = None,
        uow_factory: Callable[[str], SnapshotUnitOfWork] | None = None,
    ):
        self.repo = repo
        self.id_factory = id_factory or new_id
        self.uow_factory = uow_factory or (lambda user_id: SnapshotUnitOfWork(repo, user_id))

    def add_product(
        self,
        user_id: str,
        name: str,
        unit_purchase_price,
        quantity_purchased,
        purchase_date=None,
        category: str = "",
        supplier: str = "",
        notes: str = "",
    ) -> Product:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name is required.")
        qty = parse_quantity(quantity_purchased, "Quantity")
        price = parse_number(unit_purchase_price, "Purchase price")
        if qty <= 0:
            raise ValidationError("Quantity must be > 0.")
        if price <= 0:
            raise ValidationError("Purchase price must be > 0.")

        product = Product(
            id=self.id_factory("p"),
            name=name,
            category=(category or "").strip(),
            purchase_date=parse_iso_date(purchase_date, "Purchase date"),
            unit_purchase_price=price,
            quantity_purchased=qty,
            supplier=(supplier or "").strip(),
            notes=(notes or "").strip(),
        )
        with self.uow_factory(user_id) as uow:
            uow.replace(uow.snapshot.with_product(product))
        log.info("product_created user=%s product_id=%s qty=%s unit_price=%s", user_id, product.id, qty, price)
        return product

    def get_product(self, user_id: str, product_id: str) -> Product:
        p = self.repo.get(user_id).product_by_id(product_id)
        if not p:
            raise NotFoundError("Product not found.")
        return p

    def list_products(self, user_id: str) -> list[tuple[Product, int]]:
        snapshot = self.repo.get(user_id)
        levels = stock_levels(snapshot)
        return [(p, levels[p.id]) for p in snapshot.products]

    def in_stock_products(self, user_id: str) -> list[tuple[Product, int]]:
        return [(p, stock) for p, stock in self.list_products(user_id) if stock > 0]

    def stock_of(self, user_id: str, product_id: str) -> int:
        return stock_of(product_id, self.repo.get(user_id))
