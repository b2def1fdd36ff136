from decimal import Decimal
from pathlib import Path

import pytest

from conftest import scenario_snapshot

from fliptracker.domain.models import CapitalAdjustment, Snapshot
from fliptracker.repositories.memory_repo import InMemoryRepository
from fliptracker.repositories.sqlite_repo import SqliteRepository
from fliptracker.repositories.unit_of_work import SnapshotUnitOfWork


def _repo(tmp_path: Path) -> SqliteRepository:
    repo = SqliteRepository(tmp_path / "flip.db")
    repo.init_db()
    return repo


def test_sqlite_round_trip_keeps_order_and_exact_decimals(tmp_path: Path):
    repo = _repo(tmp_path)
    snapshot = scenario_snapshot(with_adjustment=True).with_adjustments(
        [
            CapitalAdjustment(id="a2", date="2024-01-01", value=Decimal("0.10"), description="cents"),
            CapitalAdjustment(id="a1", date="2024-03-01", value=Decimal("200"), description="aporte"),
        ]
    )

    repo.put("u1", snapshot)

    loaded = repo.get("u1")
    assert loaded == snapshot
    assert [a.id for a in loaded.adjustments] == ["a2", "a1"]
    assert str(loaded.adjustments[0].value) == "0.10"


def test_sqlite_keeps_users_apart_and_replaces_on_put(tmp_path: Path):
    repo = _repo(tmp_path)
    repo.put("alice", scenario_snapshot())
    repo.put("bob", scenario_snapshot(with_sale=False))

    repo.put("alice", scenario_snapshot(with_sale=False))

    assert repo.get("alice").sales == ()
    assert repo.get("bob").products == scenario_snapshot().products
    assert repo.user_ids() == ["alice", "bob"]


def test_sqlite_unknown_user_gets_default_snapshot(tmp_path: Path):
    repo = _repo(tmp_path)

    snapshot = repo.get("nobody")

    assert snapshot.products == ()
    assert snapshot.config.initial_capital == 0
    assert snapshot.config.start_date


def test_sqlite_migrations_are_versioned_and_rerunnable(tmp_path: Path):
    repo = _repo(tmp_path)
    repo.put("u1", scenario_snapshot())

    repo.init_db()

    assert repo.schema_version() == 2
    assert repo.integrity_check() == "ok"
    assert repo.get("u1") == scenario_snapshot()


class FailingRepo(SqliteRepository):
    def put(self, user_id, snapshot):
        broken = Snapshot(config=snapshot.config, products=snapshot.products + (None,))
        super().put(user_id, broken)


def test_sqlite_put_rolls_back_when_a_row_fails(tmp_path: Path):
    repo = FailingRepo(tmp_path / "rollback.db")
    repo.init_db()
    SqliteRepository.put(repo, "u1", scenario_snapshot())

    with pytest.raises(AttributeError):
        repo.put("u1", scenario_snapshot(with_sale=False))

    assert repo.get("u1") == scenario_snapshot()


def test_unit_of_work_persists_only_on_clean_exit():
    repo = InMemoryRepository()
    repo.put("u1", scenario_snapshot(with_sale=False))

    with pytest.raises(RuntimeError):
        with SnapshotUnitOfWork(repo, "u1") as uow:
            uow.replace(scenario_snapshot())
            raise RuntimeError("boom")
    assert repo.get("u1").sales == ()

    with SnapshotUnitOfWork(repo, "u1") as uow:
        uow.replace(scenario_snapshot())
    assert len(repo.get("u1").sales) == 1


def test_in_memory_repository_lists_users():
    repo = InMemoryRepository()
    repo.put("b", Snapshot())
    repo.put("a", Snapshot())

    assert repo.user_ids() == ["a", "b"]
    assert repo.get("zzz").config.start_date
