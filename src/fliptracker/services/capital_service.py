from __future__ import annotations

import logging
from typing import Callable

from fliptracker.domain.errors import NotFoundError, ValidationError
from fliptracker.domain.models import CapitalAdjustment, FinancialConfig
from fliptracker.domain.numbers import parse_iso_date, parse_number
from fliptracker.repositories.contracts import SnapshotRepository
from fliptracker.repositories.unit_of_work import SnapshotUnitOfWork
from fliptracker.services.ids import new_id

log = logging.getLogger("fliptracker.capital")


def _validate_adjustment(value, description: str) -> tuple:
    amount = parse_number(value, "Value")
    text = (description or "").strip()
    if amount == 0 or not text:
        raise ValidationError("Adjustment needs a nonzero value and a description.")
    return amount, text


class CapitalService:
    """Initial capital configuration and manual capital adjustments."""

    def __init__(
        self,
        repo: SnapshotRepository,
        id_factory: Callable[[str], str] | None = None,
        uow_factory: Callable[[str], SnapshotUnitOfWork] | None = None,
    ):
        self.repo = repo
        self.id_factory = id_factory or new_id
        self.uow_factory = uow_factory or (lambda user_id: SnapshotUnitOfWork(repo, user_id))

    def get_config(self, user_id: str) -> FinancialConfig:
        return self.repo.get(user_id).config

    def configure(self, user_id: str, initial_capital, start_date=None, notes: str = "") -> FinancialConfig:
        config = FinancialConfig(
            initial_capital=parse_number(initial_capital, "Initial capital"),
            start_date=parse_iso_date(start_date, "Start date"),
            notes=(notes or "").strip(),
        )
        with self.uow_factory(user_id) as uow:
            uow.replace(uow.snapshot.with_config(config))
        log.info("config_saved user=%s initial_capital=%s start_date=%s", user_id, config.initial_capital, config.start_date)
        return config

    def list_adjustments(self, user_id: str) -> list[CapitalAdjustment]:
        return list(self.repo.get(user_id).adjustments)

    def add_adjustment(self, user_id: str, value, description: str, date=None) -> CapitalAdjustment:
        amount, text = _validate_adjustment(value, description)
        adjustment = CapitalAdjustment(
            id=self.id_factory("a"),
            date=parse_iso_date(date),
            value=amount,
            description=text,
        )
        with self.uow_factory(user_id) as uow:
            uow.replace(uow.snapshot.with_adjustments(uow.snapshot.adjustments + (adjustment,)))
        log.info("adjustment_created user=%s adjustment_id=%s value=%s", user_id, adjustment.id, amount)
        return adjustment

    def update_adjustment(self, user_id: str, adjustment_id: str, value, description: str, date=None) -> CapitalAdjustment:
        amount, text = _validate_adjustment(value, description)
        day = parse_iso_date(date)
        with self.uow_factory(user_id) as uow:
            if uow.snapshot.adjustment_by_id(adjustment_id) is None:
                raise NotFoundError("Adjustment not found.")
            updated = CapitalAdjustment(id=adjustment_id, date=day, value=amount, description=text)
            uow.replace(
                uow.snapshot.with_adjustments(
                    updated if a.id == adjustment_id else a for a in uow.snapshot.adjustments
                )
            )
        log.info("adjustment_updated user=%s adjustment_id=%s value=%s", user_id, adjustment_id, amount)
        return updated

    def delete_adjustment(self, user_id: str, adjustment_id: str) -> None:
        with self.uow_factory(user_id) as uow:
            if uow.snapshot.adjustment_by_id(adjustment_id) is None:
                raise NotFoundError("Adjustment not found.")
            uow.replace(uow.snapshot.with_adjustments(a for a in uow.snapshot.adjustments if a.id != adjustment_id))
        log.info("adjustment_deleted user=%s adjustment_id=%s", user_id, adjustment_id)
