"""Smart resize engine for retargeting whole designs."""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import replace

from ..enums import ElementType
from ..exceptions import ResizeError
from ..geometry import group_bounds, scale_factors
from ..models import Design, DesignElement, new_id, utcnow
from ..validators import validate_design, validate_dimensions
from .strategy import ElementResizeStrategy

logger = logging.getLogger("resizeplatform.layout")


class SmartResizeEngine:
    """Retarget a design to new canvas dimensions.

    Features:
    - Importance-aware scaling of standalone elements
    - Rigid scaling of grouped elements (shared ``group_id``)
    - Text reflow and logo minimum size
    - Source design is never modified
    """

    def __init__(self, strategy: ElementResizeStrategy | None = None) -> None:
        self.strategy = strategy or ElementResizeStrategy()

    def resize(self, design: Design, target_width: float, target_height: float) -> Design:
        """Produce a new design at the target size.

        Args:
            design: Source design.
            target_width: Target canvas width (> 0).
            target_height: Target canvas height (> 0).

        Returns:
            A new Design with a fresh id, the target size and transformed elements.

        Raises:
            ValidationError: If the target size or the source design is invalid.
            ResizeError: If the transform produces non-finite geometry.
        """
        validate_dimensions(target_width, target_height)
        validate_design(design)

        target_size = (target_width, target_height)
        width_scale, height_scale = scale_factors((design.width, design.height), target_size)

        standalone, groups = self._partition(design.elements)

        transformed: dict[str, DesignElement] = {}
        for elem in standalone:
            transformed[elem.id] = self.strategy.transform(
                elem, target_size, width_scale, height_scale
            )

        for group_id, members in groups.items():
            logger.debug("Resizing group %s (%d members)", group_id, len(members))
            for new_elem in self._transform_group(
                members, (design.width, design.height), target_size, width_scale, height_scale
            ):
                transformed[new_elem.id] = new_elem

        # Keep the source stacking order
        elements = [transformed[e.id] for e in design.elements]
        self._check_finite(elements)

        now = utcnow()
        metadata = dict(design.metadata)
        metadata["resized_from"] = design.id

        result = Design(
            id=new_id(),
            name=design.name,
            width=target_width,
            height=target_height,
            elements=elements,
            background_color=design.background_color,
            metadata=metadata,
            created_at=now,
            updated_at=now,
        )

        logger.info(
            "Resized design %s %sx%s -> %sx%s (%d standalone, %d groups)",
            design.id, design.width, design.height, target_width, target_height,
            len(standalone), len(groups),
        )
        return result

    def _partition(
        self, elements: list[DesignElement]
    ) -> tuple[list[DesignElement], dict[str, list[DesignElement]]]:
        """Split elements into standalone ones and groups keyed by group_id."""
        standalone: list[DesignElement] = []
        groups: dict[str, list[DesignElement]] = defaultdict(list)

        for elem in elements:
            if elem.group_id is None:
                standalone.append(elem)
            else:
                groups[elem.group_id].append(elem)

        return standalone, dict(groups)

    def _transform_group(
        self,
        members: list[DesignElement],
        source_size: tuple[float, float],
        target_size: tuple[float, float],
        width_scale: float,
        height_scale: float,
    ) -> list[DesignElement]:
        """Resize a group rigidly, keeping members' relative layout."""
        bounds = group_bounds(members)
        source_w, source_h = source_size
        target_w, target_h = target_size
        group_scale = min(target_w / source_w, target_h / source_h)

        new_x = bounds.x * width_scale
        new_y = bounds.y * height_scale
        new_w = bounds.width * group_scale
        new_h = bounds.height * group_scale

        results: list[DesignElement] = []
        for elem in members:
            rel_x = (elem.x - bounds.x) / bounds.width
            rel_y = (elem.y - bounds.y) / bounds.height
            rel_w = elem.width / bounds.width
            rel_h = elem.height / bounds.height

            new_elem = replace(
                elem,
                constraints=replace(elem.constraints),
                x=new_x + rel_x * new_w,
                y=new_y + rel_y * new_h,
                width=rel_w * new_w,
                height=rel_h * new_h,
            )
            if elem.type == ElementType.TEXT and elem.font_size is not None:
                new_elem.font_size = elem.font_size * group_scale

            results.append(new_elem)

        return results

    @staticmethod
    def _check_finite(elements: list[DesignElement]) -> None:
        for elem in elements:
            values = (elem.x, elem.y, elem.width, elem.height)
            if not all(math.isfinite(v) for v in values):
                raise ResizeError(f"Element '{elem.id}' produced non-finite geometry")
