"""Geometry primitives used by the resize engine and constraint checker."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .exceptions import ValidationError
from .models import DesignElement, Rect


def scale_factors(
    source_size: tuple[float, float], target_size: tuple[float, float]
) -> tuple[float, float]:
    """Per-axis scale from source to target canvas.

    Args:
        source_size: Source (width, height), both > 0.
        target_size: Target (width, height).

    Returns:
        Tuple of (width_scale, height_scale).

    Raises:
        ValidationError: If a source dimension is not positive.
    """
    source_w, source_h = source_size
    if source_w <= 0 or source_h <= 0:
        raise ValidationError(
            f"Source dimensions must be positive, got {source_w}x{source_h}"
        )
    target_w, target_h = target_size
    return target_w / source_w, target_h / source_h


def group_bounds(elements: Sequence[DesignElement]) -> Rect:
    """Smallest rectangle containing every element's box.

    An empty input yields a zero rectangle.
    """
    if not elements:
        return Rect(0.0, 0.0, 0.0, 0.0)

    boxes = np.array(
        [(e.x, e.y, e.x + e.width, e.y + e.height) for e in elements],
        dtype=np.float64,
    )
    min_x, min_y = boxes[:, 0].min(), boxes[:, 1].min()
    max_x, max_y = boxes[:, 2].max(), boxes[:, 3].max()

    return Rect(
        x=float(min_x),
        y=float(min_y),
        width=float(max_x - min_x),
        height=float(max_y - min_y),
    )


def rect_contains(outer: Rect, inner: Rect) -> bool:
    """True if ``inner`` lies fully inside ``outer`` (edges may touch)."""
    return (
        inner.x >= outer.x
        and inner.y >= outer.y
        and inner.x2 <= outer.x2
        and inner.y2 <= outer.y2
    )
