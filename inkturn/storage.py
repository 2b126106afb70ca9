"""JSON file storage for session snapshots.

One session is one snapshot file. There is no database: load() parses the
file into a SessionContext, save() writes the whole snapshot back.

Layout (CLI):

    {autosave_dir}/
      autosave.json         ← {"ink": ..., "turn": n, "gen": n, "metrics"?: {...}}

Layout (HTTP surface):

    {data_dir}/
      sessions/
        {slug}.json         ← same format, one file per session

Writes go through a temporary file in the same directory and an atomic
rename, so a later load never observes a half-written snapshot.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from inkturn.errors import SnapshotError
from inkturn.models import SessionContext, Snapshot

logger = logging.getLogger(__name__)

AUTOSAVE_FILENAME = "autosave.json"


class SessionStore:
    def __init__(self, directory: Path, filename: str = AUTOSAVE_FILENAME) -> None:
        self._dir = Path(directory)
        self._filename = filename

    @property
    def path(self) -> Path:
        return self._dir / self._filename

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> SessionContext | None:
        """Return the persisted context, or None if nothing was saved yet."""
        snapshot = self.load_snapshot()
        if snapshot is None:
            return None
        return SessionContext.from_snapshot(snapshot)

    def load_snapshot(self) -> Snapshot | None:
        path = self.path
        if not path.is_file():
            return None
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SnapshotError(f"cannot read snapshot {path}: {e}") from e
        try:
            snapshot = Snapshot.model_validate_json(text)
        except ValidationError as e:
            raise SnapshotError(f"snapshot {path} is malformed: {e}") from e
        logger.debug("loaded snapshot %s turn=%d gen=%d", path, snapshot.turn, snapshot.gen)
        return snapshot

    def save(self, context: SessionContext) -> None:
        """Persist the context's snapshot, replacing any previous one."""
        self._dir.mkdir(parents=True, exist_ok=True)
        payload = context.to_snapshot().to_json()
        path = self.path
        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", delete=False, dir=self._dir, prefix=path.name, suffix=".tmp", encoding="utf-8"
            ) as tmp_file:
                tmp_file.write(payload)
                tmp_path = Path(tmp_file.name)
            os.replace(tmp_path, path)
        except OSError:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise
        logger.debug("saved snapshot %s turn=%d gen=%d", path, context.turn, context.generation)

    def delete(self) -> bool:
        path = self.path
        if not path.is_file():
            return False
        path.unlink()
        return True
