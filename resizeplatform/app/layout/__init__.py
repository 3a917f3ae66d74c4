"""Smart resize engine for the resize platform."""

from .engine import SmartResizeEngine
from .strategy import ElementResizeStrategy, estimate_text_height

__all__ = ["SmartResizeEngine", "ElementResizeStrategy", "estimate_text_height"]
