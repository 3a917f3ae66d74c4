"""Per-element resize policy."""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from ..config import Config
from ..enums import ElementImportance, ElementType
from ..models import DesignElement

logger = logging.getLogger("resizeplatform.layout.strategy")


class ElementResizeStrategy:
    """Decide the new geometry of a standalone element.

    Scale selection is driven by importance:
    - critical/high: the tighter axis scale, so the element never outgrows
      the canvas on either axis
    - medium: mean of both axis scales
    - low: the looser axis scale

    Size handling is then specialised by element type (text reflow, logo
    minimum size, proportional default), followed by min/max clamps and
    finally margin-based positioning.
    """

    def select_scale(
        self,
        importance: ElementImportance,
        width_scale: float,
        height_scale: float,
    ) -> float:
        if importance in (ElementImportance.CRITICAL, ElementImportance.HIGH):
            return min(width_scale, height_scale)
        if importance == ElementImportance.MEDIUM:
            return (width_scale + height_scale) / 2
        return max(width_scale, height_scale)

    def transform(
        self,
        element: DesignElement,
        target_size: tuple[float, float],
        width_scale: float,
        height_scale: float,
    ) -> DesignElement:
        """Compute the resized copy of one ungrouped element.

        Args:
            element: Source element (not modified).
            target_size: Target canvas (width, height).
            width_scale: Global horizontal scale.
            height_scale: Global vertical scale.

        Returns:
            A new DesignElement with updated position and size.
        """
        target_w, target_h = target_size
        scale = self.select_scale(element.importance, width_scale, height_scale)

        new_elem = replace(element, constraints=replace(element.constraints))

        if element.type == ElementType.TEXT:
            self._resize_text(new_elem, scale, target_w)
        elif element.type == ElementType.LOGO:
            self._resize_logo(new_elem, min(width_scale, height_scale))
        else:
            self._resize_default(new_elem, scale)

        self._apply_dimension_constraints(new_elem)

        # Right/bottom margins need the resolved size, so position comes last
        self._position(new_elem, element, target_w, target_h, width_scale, height_scale)

        logger.debug(
            "Element %s (%s, %s): scale=%.3f -> %.1fx%.1f at (%.1f, %.1f)",
            element.id, element.type.value, element.importance.name.lower(),
            scale, new_elem.width, new_elem.height, new_elem.x, new_elem.y,
        )
        return new_elem

    def _position(
        self,
        new_elem: DesignElement,
        source: DesignElement,
        target_w: float,
        target_h: float,
        width_scale: float,
        height_scale: float,
    ) -> None:
        c = source.constraints
        new_elem.x = source.x * width_scale
        new_elem.y = source.y * height_scale

        if c.keep_relative_position or not c.has_margins:
            return

        if c.margin_left is not None:
            new_elem.x = c.margin_left
        if c.margin_top is not None:
            new_elem.y = c.margin_top
        if c.margin_right is not None:
            new_elem.x = target_w - new_elem.width - c.margin_right
        if c.margin_bottom is not None:
            new_elem.y = target_h - new_elem.height - c.margin_bottom

    def _resize_text(self, elem: DesignElement, scale: float, target_w: float) -> None:
        if elem.constraints.lock_aspect_ratio:
            elem.width *= scale
            elem.height *= scale
            if elem.font_size is not None:
                elem.font_size *= scale
            return

        # Reflow: width is capped, font keeps a legibility floor
        new_width = min(elem.width * scale, target_w * Config.TEXT_MAX_WIDTH_RATIO)
        elem.width = new_width

        if elem.font_size is None:
            elem.height *= scale
            return

        new_font_size = max(elem.font_size * scale, Config.MIN_FONT_SIZE)
        elem.font_size = new_font_size

        if elem.content:
            elem.height = estimate_text_height(elem.content, new_font_size, new_width)
        else:
            elem.height *= scale

    def _resize_logo(self, elem: DesignElement, scale: float) -> None:
        min_size = Config.MIN_LOGO_SIZE

        if elem.constraints.lock_aspect_ratio:
            aspect_ratio = elem.width / elem.height
            new_width = max(elem.width * scale, min_size)
            elem.width = new_width
            elem.height = new_width / aspect_ratio
        else:
            elem.width = max(elem.width * scale, min_size)
            elem.height = max(elem.height * scale, min_size)

    def _resize_default(self, elem: DesignElement, scale: float) -> None:
        if elem.constraints.lock_aspect_ratio:
            aspect_ratio = elem.width / elem.height
            elem.width *= scale
            elem.height = elem.width / aspect_ratio
        else:
            elem.width *= scale
            elem.height *= scale

    def _apply_dimension_constraints(self, elem: DesignElement) -> None:
        # Min first, then max: a conflicting max wins
        c = elem.constraints
        if c.min_width is not None:
            elem.width = max(elem.width, c.min_width)
        if c.min_height is not None:
            elem.height = max(elem.height, c.min_height)
        if c.max_width is not None:
            elem.width = min(elem.width, c.max_width)
        if c.max_height is not None:
            elem.height = min(elem.height, c.max_height)


def estimate_text_height(text: str, font_size: float, width: float) -> float:
    """Rough rendered height of ``text`` wrapped to ``width``.

    Args:
        text: Text content.
        font_size: Font size in pixels.
        width: Available line width in pixels.

    Returns:
        Estimated block height including line spacing.
    """
    line_height = font_size * Config.LINE_HEIGHT_RATIO
    chars_per_line = int(width / (font_size * Config.CHAR_WIDTH_RATIO))
    if chars_per_line <= 0:
        return line_height

    lines = math.ceil(len(text) / chars_per_line)
    return lines * line_height
