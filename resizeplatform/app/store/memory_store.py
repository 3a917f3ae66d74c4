"""In-process design store."""

from __future__ import annotations

import copy
import threading

from ..exceptions import DesignNotFoundError
from ..models import Design
from .base_store import BaseDesignStore


class InMemoryDesignStore(BaseDesignStore):
    """Dict-backed store. Designs are copied on the way in and out."""

    def __init__(self) -> None:
        self._designs: dict[str, Design] = {}
        self._lock = threading.Lock()

    def load(self, design_id: str) -> Design:
        with self._lock:
            design = self._designs.get(design_id)
            if design is None:
                raise DesignNotFoundError(f"Design not found: {design_id}")
            return copy.deepcopy(design)

    def save(self, design: Design) -> None:
        with self._lock:
            self._designs[design.id] = copy.deepcopy(design)

    def delete(self, design_id: str) -> bool:
        with self._lock:
            return self._designs.pop(design_id, None) is not None

    def exists(self, design_id: str) -> bool:
        with self._lock:
            return design_id in self._designs
