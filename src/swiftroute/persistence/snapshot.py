"""Load and save the dispatcher workspace snapshot."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ..config import settings
from ..schemas.workspace import AppSnapshot
from .filesystem import FileStorage

logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(self, storage: FileStorage | None = None, path: Path | None = None) -> None:
        self.storage = storage or FileStorage()
        self.path = self.storage.path_for(path or settings.snapshot_file)

    def load(self) -> AppSnapshot:
        """Return the stored snapshot, or a fresh one when missing or unreadable."""

        if not self.path.exists():
            return AppSnapshot()
        try:
            return AppSnapshot.model_validate(self.storage.read_json(self.path))
        except (json.JSONDecodeError, ValidationError, OSError) as exc:
            logger.error(f"Failed to parse saved state at {self.path}, starting fresh: {exc}")
            return AppSnapshot()

    def save(self, snapshot: AppSnapshot) -> None:
        self.storage.write_json(self.path, snapshot.model_dump(mode="json"))
