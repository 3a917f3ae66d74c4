"""Global configuration for the resize platform."""

from __future__ import annotations


class Config:
    """Global configuration."""

    # Batch processing
    MAX_CONCURRENT_JOBS = 4  # Process-wide ceiling on simultaneous resize jobs

    # Element sizing
    MIN_LOGO_SIZE = 32
    MIN_FONT_SIZE = 9  # Legibility floor for reflowed text
    TEXT_MAX_WIDTH_RATIO = 0.9  # Reflowed text never exceeds 90% of canvas width

    # Text height estimate
    CHAR_WIDTH_RATIO = 0.6  # Average glyph width relative to font size
    LINE_HEIGHT_RATIO = 1.5

    # File size checks
    FILE_SIZE_WARNING_RATIO = 0.9  # Warn above 90% of the platform limit
    COMPLEXITY_BASELINE_ELEMENTS = 10

    # Export presets
    DEFAULT_JPEG_QUALITY = 85
    MIN_SIZE_JPEG_QUALITY = 60
