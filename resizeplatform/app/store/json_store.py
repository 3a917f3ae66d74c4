"""Directory-backed JSON design store."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from ..exceptions import DesignNotFoundError, StoreError
from ..models import Design
from .base_store import BaseDesignStore

logger = logging.getLogger("resizeplatform.store.json")


class JsonDesignStore(BaseDesignStore):
    """Store each design as ``<id>.json`` inside a directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, design_id: str) -> Path:
        if not design_id or "/" in design_id or "\\" in design_id or design_id.startswith("."):
            raise StoreError(f"Invalid design id: {design_id!r}")
        return self.directory / f"{design_id}.json"

    def load(self, design_id: str) -> Design:
        path = self._path(design_id)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise DesignNotFoundError(f"Design not found: {design_id}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read design '{design_id}': {e}") from e

        try:
            return Design.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Malformed design '{design_id}': {e}") from e

    def save(self, design: Design) -> None:
        path = self._path(design.id)
        tmp_path = path.with_suffix(".json.tmp")
        with self._lock:
            try:
                with tmp_path.open("w", encoding="utf-8") as f:
                    json.dump(design.to_dict(), f, indent=2)
                tmp_path.replace(path)
            except OSError as e:
                raise StoreError(f"Failed to write design '{design.id}': {e}") from e
        logger.debug("Saved design %s to %s", design.id, path)

    def delete(self, design_id: str) -> bool:
        path = self._path(design_id)
        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                return False
        return True

    def exists(self, design_id: str) -> bool:
        return self._path(design_id).exists()
