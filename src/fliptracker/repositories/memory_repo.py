from __future__ import annotations

from fliptracker.domain.models import Snapshot
from fliptracker.repositories.snapshot_codec import default_snapshot


class InMemoryRepository:
    """Process-local store keyed by user id."""

    def __init__(self):
        self._data: dict[str, Snapshot] = {}

    def get(self, user_id: str) -> Snapshot:
        snapshot = self._data.get(user_id)
        if snapshot is None:
            return default_snapshot()
        return snapshot

    def put(self, user_id: str, snapshot: Snapshot) -> None:
        self._data[user_id] = snapshot

    def user_ids(self) -> list[str]:
        return sorted(self._data)
