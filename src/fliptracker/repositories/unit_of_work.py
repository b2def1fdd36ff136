from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from fliptracker.domain.models import Snapshot
from fliptracker.repositories.contracts import SnapshotRepository


@dataclass
class SnapshotUnitOfWork:
    """Loads a user's snapshot, collects its replacement and stores it on a clean exit.

    Services build a new snapshot and call ``replace``; nothing is written if
    the block raises or if nothing was replaced.
    """

    repo: SnapshotRepository
    user_id: str
    snapshot: Snapshot = field(init=False)
    _pending: Optional[Snapshot] = field(init=False, default=None)

    def __enter__(self) -> "SnapshotUnitOfWork":
        self.snapshot = self.repo.get(self.user_id)
        self._pending = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and self._pending is not None:
            self.repo.put(self.user_id, self._pending)
        self._pending = None
        return None

    def replace(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot
        self._pending = snapshot
