"""Platform constraint checks for resized designs and exported files."""

from __future__ import annotations

import logging
import math
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ..config import Config
from ..constants import (
    INDEXED_BYTES_PER_PIXEL,
    JPEG_MAX_BYTES_PER_PIXEL,
    PNG_BYTES_PER_PIXEL,
    SAFE_ZONE_IMPORTANCE,
    SIZE_INDETERMINATE_FORMATS,
)
from ..enums import ElementType, FileFormat, PNGColorType, Severity
from ..geometry import rect_contains
from ..models import (
    ConstraintViolation,
    Design,
    ExportSettings,
    Platform,
    PlatformDimension,
    SafeZone,
)

logger = logging.getLogger("resizeplatform.constraints")


class PlatformConstraintChecker:
    """Validate designs and exported artifacts against platform rules.

    Every check runs independently and all violations are returned;
    nothing short-circuits.
    """

    def validate(
        self,
        design: Design,
        platform: Platform,
        dimension: PlatformDimension,
        export_settings: ExportSettings,
    ) -> list[ConstraintViolation]:
        """Check a design before export.

        Args:
            design: Design to check, usually a resize output.
            platform: Platform the design is published to.
            dimension: The platform slot the design targets.
            export_settings: Intended export settings.

        Returns:
            All violations found, in check order.
        """
        formats = platform.formats_for(dimension)
        violations: list[ConstraintViolation] = []

        violations.extend(self.check_dimensions(design.width, design.height, dimension))
        violations.extend(self.check_format(export_settings, formats))

        estimated_kb = estimate_file_size_kb(design, export_settings)
        if estimated_kb is not None:
            violations.extend(
                self.check_file_size(estimated_kb, platform.max_file_size_for(dimension))
            )

        safe_zone = platform.safe_zone_for(dimension)
        if safe_zone is not None:
            violations.extend(self.check_safe_zone(design, safe_zone))

        if platform.logo_requirement:
            violations.extend(self.check_logo_presence(design))

        logger.debug(
            "Validated design %s against %s %s: %d violations",
            design.id, platform.name, dimension.dimension_text, len(violations),
        )
        return violations

    def validate_file(
        self,
        file_path: str | Path,
        platform: Platform,
        dimension: PlatformDimension,
    ) -> list[ConstraintViolation]:
        """Check an exported file.

        Args:
            file_path: Path to the exported artifact.
            platform: Platform the file is published to.
            dimension: The platform slot the file targets.

        Returns:
            All violations found. An unreadable file yields a single
            ``fileAccess`` error.
        """
        path = Path(file_path)
        formats = platform.formats_for(dimension)

        try:
            size_bytes = path.stat().st_size
        except OSError as e:
            return [
                ConstraintViolation(
                    message=f"Error analyzing file: {e}",
                    severity=Severity.ERROR,
                    property_name="fileAccess",
                    value="Error",
                    requirement="File must be accessible for validation",
                )
            ]

        violations: list[ConstraintViolation] = []
        violations.extend(
            self.check_file_size(size_bytes / 1024, platform.max_file_size_for(dimension))
        )

        extension = path.suffix.lower().lstrip(".")
        allowed = sorted({f.file_extension for f in formats})
        if extension not in allowed:
            violations.append(
                ConstraintViolation(
                    message="File format not supported by platform",
                    severity=Severity.ERROR,
                    property_name="fileFormat",
                    value=extension,
                    requirement=f"Must be one of: {', '.join(allowed)}",
                )
            )

        try:
            with Image.open(path) as img:
                image_size = img.size
                image_mode = img.mode
        except (UnidentifiedImageError, OSError) as e:
            # Vector and HTML exports have no raster header to inspect
            logger.debug("Skipping raster checks for %s: %s", path.name, e)
            return violations

        violations.extend(self.check_dimensions(image_size[0], image_size[1], dimension))

        if FileFormat.PNG8 in formats and extension == "png" and image_mode != "P":
            violations.append(
                ConstraintViolation(
                    message="Platform requires PNG-8 (indexed color)",
                    severity=Severity.ERROR,
                    property_name="pngColorType",
                    value=image_mode,
                    requirement="indexed (PNG-8)",
                )
            )

        return violations

    def check_dimensions(
        self, width: float, height: float, dimension: PlatformDimension
    ) -> list[ConstraintViolation]:
        if int(width) == dimension.width and int(height) == dimension.height:
            return []
        return [
            ConstraintViolation(
                message="Design dimensions do not match platform requirements",
                severity=Severity.ERROR,
                property_name="dimensions",
                value=f"{int(width)}x{int(height)}",
                requirement=dimension.dimension_text,
            )
        ]

    def check_format(
        self, export_settings: ExportSettings, formats: list[FileFormat]
    ) -> list[ConstraintViolation]:
        violations: list[ConstraintViolation] = []

        if export_settings.format not in formats:
            violations.append(
                ConstraintViolation(
                    message="Export format not supported by platform",
                    severity=Severity.ERROR,
                    property_name="fileFormat",
                    value=export_settings.format.value,
                    requirement=f"Must be one of: {', '.join(f.value for f in formats)}",
                )
            )

        if (
            FileFormat.PNG8 in formats
            and export_settings.format == FileFormat.PNG
            and export_settings.png_color_type != PNGColorType.INDEXED
        ):
            violations.append(
                ConstraintViolation(
                    message="Platform requires PNG-8 (indexed color)",
                    severity=Severity.ERROR,
                    property_name="pngColorType",
                    value=export_settings.png_color_type.value,
                    requirement="indexed (PNG-8)",
                )
            )

        return violations

    def check_file_size(self, size_kb: float, max_kb: int) -> list[ConstraintViolation]:
        if size_kb > max_kb:
            return [
                ConstraintViolation(
                    message="File size exceeds platform limit",
                    severity=Severity.ERROR,
                    property_name="fileSize",
                    value=f"{size_kb:.0f}KB",
                    requirement=f"Maximum {max_kb}KB",
                )
            ]
        if size_kb > max_kb * Config.FILE_SIZE_WARNING_RATIO:
            return [
                ConstraintViolation(
                    message="File size is close to platform limit",
                    severity=Severity.WARNING,
                    property_name="fileSize",
                    value=f"{size_kb:.0f}KB",
                    requirement=f"Maximum {max_kb}KB",
                )
            ]
        return []

    def check_safe_zone(self, design: Design, safe_zone: SafeZone) -> list[ConstraintViolation]:
        safe_rect = safe_zone.inset(design.width, design.height)
        violations: list[ConstraintViolation] = []

        for elem in design.elements:
            if elem.importance not in SAFE_ZONE_IMPORTANCE:
                continue
            if not rect_contains(safe_rect, elem.rect):
                violations.append(
                    ConstraintViolation(
                        message="Important element extends outside safe zone",
                        severity=Severity.WARNING,
                        property_name="safeZone",
                        value=f"Element ID: {elem.id}",
                        requirement="High and critical elements should be within safe zone",
                    )
                )

        return violations

    def check_logo_presence(self, design: Design) -> list[ConstraintViolation]:
        if any(e.type == ElementType.LOGO for e in design.elements):
            return []
        return [
            ConstraintViolation(
                message="Logo element required but not found",
                severity=Severity.ERROR,
                property_name="logoPresence",
                value="Missing",
                requirement="Design must include a logo element",
            )
        ]


def estimate_file_size_kb(design: Design, export_settings: ExportSettings) -> float | None:
    """Estimate the exported size of a design without rendering it.

    Args:
        design: Design to estimate.
        export_settings: Target format and encoder settings.

    Returns:
        Estimated size in KB, or None for formats whose size does not
        depend on pixel geometry (SVG, HTML5).
    """
    file_format = export_settings.format
    if file_format in SIZE_INDETERMINATE_FORMATS:
        return None

    if file_format in (FileFormat.JPG, FileFormat.JPEG):
        bytes_per_pixel = JPEG_MAX_BYTES_PER_PIXEL * (1.0 - export_settings.jpeg_quality / 100.0)
    elif file_format == FileFormat.PNG:
        bytes_per_pixel = PNG_BYTES_PER_PIXEL[export_settings.png_color_type]
    else:
        bytes_per_pixel = INDEXED_BYTES_PER_PIXEL

    pixel_count = design.width * design.height
    complexity = 1.0 + math.log10(
        max(1, len(design.elements)) / Config.COMPLEXITY_BASELINE_ELEMENTS
    )

    return pixel_count * bytes_per_pixel * complexity / 1024
