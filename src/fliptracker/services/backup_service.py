from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from fliptracker.domain.errors import ValidationError
from fliptracker.domain.models import Snapshot
from fliptracker.repositories.contracts import SnapshotRepository
from fliptracker.repositories.snapshot_codec import snapshot_from_dict, snapshot_to_dict

log = logging.getLogger(__name__)

REQUIRED_KEYS = ("configuration", "products")


def _safe_name(user_id: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]", "_", user_id) or "user"


class BackupService:
    """JSON backups of a user's snapshot."""

    def __init__(self, repo: SnapshotRepository, backup_dir: Path | str, max_backups: int = 30):
        self.repo = repo
        self.backup_dir = Path(backup_dir)
        self.max_backups = max_backups

    def export_json(self, user_id: str, path: Path | str) -> Path:
        target = Path(path)
        payload = snapshot_to_dict(self.repo.get(user_id))
        target.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        log.info("backup_exported user=%s path=%s", user_id, target)
        return target

    def import_json(self, user_id: str, path: Path | str) -> Snapshot:
        """Replace the user's data with the contents of a backup file."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ValidationError(f"Invalid backup file: {e}") from e
        if not isinstance(data, dict) or any(k not in data for k in REQUIRED_KEYS):
            raise ValidationError("Invalid backup file: configuration and products are required.")

        snapshot = snapshot_from_dict(data)
        self.repo.put(user_id, snapshot)
        log.warning(
            "backup_imported user=%s products=%s sales=%s adjustments=%s",
            user_id, len(snapshot.products), len(snapshot.sales), len(snapshot.adjustments),
        )
        return snapshot

    def create_backup(self, user_id: str) -> Path:
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        target = self.export_json(user_id, self.backup_dir / f"{self._prefix(user_id)}{ts}.json")
        self._enforce_retention(user_id)
        return target

    def list_backups(self, user_id: str) -> list[Path]:
        if not self.backup_dir.exists():
            return []
        return sorted(self.backup_dir.glob(f"{self._prefix(user_id)}[0-9]*.json"))

    def restore_latest_backup(self, user_id: str) -> Optional[Path]:
        files = self.list_backups(user_id)
        if not files:
            return None
        latest = files[-1]
        self.import_json(user_id, latest)
        return latest

    def _prefix(self, user_id: str) -> str:
        return f"backup_{_safe_name(user_id)}_"

    def _enforce_retention(self, user_id: str) -> None:
        files = self.list_backups(user_id)
        if len(files) <= self.max_backups:
            return
        for old in files[: len(files) - self.max_backups]:
            old.unlink(missing_ok=True)
