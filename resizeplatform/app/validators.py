"""Precondition checks for the resize platform."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .exceptions import ValidationError

if TYPE_CHECKING:
    from .models import Design


def validate_dimensions(width: float, height: float) -> None:
    """Validate a pair of canvas dimensions.

    Args:
        width: Width in pixels.
        height: Height in pixels.

    Raises:
        ValidationError: If dimensions are not positive finite numbers.
    """
    if isinstance(width, bool) or isinstance(height, bool) or not (
        isinstance(width, int | float) and isinstance(height, int | float)
    ):
        raise ValidationError(
            f"Dimensions must be numbers, got {type(width).__name__} and {type(height).__name__}"
        )

    if not (math.isfinite(width) and math.isfinite(height)):
        raise ValidationError(f"Dimensions must be finite, got {width}x{height}")
    if width <= 0 or height <= 0:
        raise ValidationError(f"Dimensions must be positive, got {width}x{height}")


def validate_design(design: Design) -> None:
    """Validate that a design can be resized.

    Every element needs a positive size, otherwise its aspect ratio is
    undefined.

    Raises:
        ValidationError: If the design or any element has degenerate geometry.
    """
    validate_dimensions(design.width, design.height)

    seen: set[str] = set()
    for elem in design.elements:
        if elem.id in seen:
            raise ValidationError(f"Duplicate element id '{elem.id}'")
        seen.add(elem.id)
        if not all(math.isfinite(v) for v in (elem.x, elem.y, elem.width, elem.height)):
            raise ValidationError(f"Element '{elem.id}' has non-finite geometry")
        if elem.width <= 0 or elem.height <= 0:
            raise ValidationError(
                f"Element '{elem.id}' must have positive size, got {elem.width}x{elem.height}"
            )


def validate_pixel_size(width: int, height: int) -> None:
    """Validate a platform slot size: positive whole pixels.

    Raises:
        ValidationError: If either side is not a positive integer.
    """
    if isinstance(width, bool) or isinstance(height, bool) or not (
        isinstance(width, int) and isinstance(height, int)
    ):
        raise ValidationError(f"Pixel sizes must be integers, got {width!r}x{height!r}")
    if width <= 0 or height <= 0:
        raise ValidationError(f"Pixel sizes must be positive, got {width}x{height}")


def validate_insets(top: float, right: float, bottom: float, left: float) -> None:
    """Validate safe-zone insets.

    Raises:
        ValidationError: If an inset is negative or not finite.
    """
    for side, value in (("top", top), ("right", right), ("bottom", bottom), ("left", left)):
        if isinstance(value, bool) or not isinstance(value, int | float) or not math.isfinite(value):
            raise ValidationError(f"Safe zone {side} inset must be a finite number, got {value!r}")
        if value < 0:
            raise ValidationError(f"Safe zone {side} inset must be non-negative, got {value}")


def validate_jpeg_quality(quality: int) -> None:
    """Raises ValidationError unless ``quality`` is an integer in 0-100."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise ValidationError(f"JPEG quality must be an integer, got {quality!r}")
    if not 0 <= quality <= 100:
        raise ValidationError(f"JPEG quality must be between 0 and 100, got {quality}")
