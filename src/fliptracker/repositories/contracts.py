from __future__ import annotations

from typing import Protocol

from fliptracker.domain.models import Snapshot


class SnapshotRepository(Protocol):
    def get(self, user_id: str) -> Snapshot: ...
    def put(self, user_id: str, snapshot: Snapshot) -> None: ...
    def user_ids(self) -> list[str]: ...
