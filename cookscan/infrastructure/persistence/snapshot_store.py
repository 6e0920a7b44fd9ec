"""JSON snapshot files shared by the file-backed repositories.

Each entity lives in ``<base_dir>/<collection>/<entity_id>.json``. Writes go
through a temporary file and an atomic rename so a crash never leaves a
half-written snapshot behind. All methods are blocking; repositories call
them through ``asyncio.to_thread``.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from cookscan.constants import SNAPSHOT_VERSION
from cookscan.domain.exceptions import RepositoryError

logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r"^[A-Za-z0-9_.-]+$")


def _is_safe_id(entity_id: str) -> bool:
    return bool(entity_id) and bool(_SAFE_ID.match(entity_id)) and not entity_id.startswith(".")


class JsonSnapshotStore:
    """Persist dictionaries as one JSON file per entity."""

    def __init__(self, base_dir: str | Path, collection: str) -> None:
        self.base_dir = Path(base_dir)
        self.collection_dir = self.base_dir / collection
        self.collection = collection
        self._ensure_dir()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def write(self, entity_id: str, payload: Dict[str, Any]) -> None:
        path = self._path(entity_id)
        tmp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
        snapshot = {"version": SNAPSHOT_VERSION, **payload}
        try:
            tmp_path.write_text(json.dumps(snapshot, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(path)
            logger.debug("Saved %s snapshot %s", self.collection, entity_id)
        except (OSError, TypeError, ValueError) as exc:
            raise RepositoryError(f"Failed to save {self.collection} {entity_id}", exc)
        finally:
            if tmp_path.exists():
                tmp_path.unlink(missing_ok=True)

    def read(self, entity_id: str) -> Optional[Dict[str, Any]]:
        """Load one snapshot; None when missing or when no entity can have this id."""
        if not _is_safe_id(entity_id):
            return None
        return self._load(self._path(entity_id))

    def read_all(self) -> Iterator[Tuple[str, Dict[str, Any]]]:
        """Yield ``(entity_id, snapshot)`` pairs; unreadable files are skipped with a warning."""
        try:
            paths = sorted(self.collection_dir.glob("*.json"))
        except OSError as exc:  # pragma: no cover - disk failure
            raise RepositoryError(f"Failed to list {self.collection} snapshots", exc)
        for path in paths:
            try:
                data = self._load(path)
            except RepositoryError as exc:
                logger.warning("Skipping %s snapshot %s: %s", self.collection, path.name, exc)
                continue
            if data is not None:
                yield path.stem, data

    def exists(self, entity_id: str) -> bool:
        return _is_safe_id(entity_id) and self._path(entity_id).exists()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_dir(self) -> None:
        try:
            self.collection_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:  # pragma: no cover - disk failure
            raise RepositoryError(f"Failed to create directory {self.collection_dir}", exc)

    def _path(self, entity_id: str) -> Path:
        if not _is_safe_id(entity_id):
            raise RepositoryError(f"Invalid {self.collection} id: {entity_id!r}")
        return self.collection_dir / f"{entity_id}.json"

    def _load(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise RepositoryError(f"Corrupted snapshot {path.name}", exc)
        except OSError as exc:  # pragma: no cover - disk failure
            raise RepositoryError(f"Failed to read snapshot {path.name}", exc)
        if not isinstance(data, dict):
            raise RepositoryError(f"Unexpected snapshot structure in {path.name}")
        return data
