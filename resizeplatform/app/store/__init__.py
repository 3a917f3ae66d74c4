"""Design repositories for the resize platform."""

from __future__ import annotations

from .base_store import BaseDesignStore
from .json_store import JsonDesignStore
from .memory_store import InMemoryDesignStore

__all__ = ["BaseDesignStore", "InMemoryDesignStore", "JsonDesignStore"]
