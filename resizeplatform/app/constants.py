"""Shared constants for the resize platform."""

from __future__ import annotations

from .enums import ElementImportance, FileFormat, PNGColorType

# Importance levels that must stay inside a platform's safe zone
SAFE_ZONE_IMPORTANCE = frozenset({
    ElementImportance.HIGH,
    ElementImportance.CRITICAL,
})

# Formats whose size cannot be derived from pixel geometry
SIZE_INDETERMINATE_FORMATS = frozenset({FileFormat.SVG, FileFormat.HTML5})

# Estimated encoded bytes per pixel for lossless formats
PNG_BYTES_PER_PIXEL = {
    PNGColorType.INDEXED: 1.0 / 8.0,
    PNGColorType.RGB: 3.0 / 8.0,
    PNGColorType.RGBA: 4.0 / 8.0,
}
INDEXED_BYTES_PER_PIXEL = 1.0 / 8.0
JPEG_MAX_BYTES_PER_PIXEL = 0.25

# Common publishing sizes (name, width, height)
STANDARD_DIMENSIONS = [
    ("Facebook Feed", 1200, 630),
    ("Instagram Post", 1080, 1080),
    ("Instagram Story", 1080, 1920),
    ("Twitter Post", 1200, 675),
    ("LinkedIn Post", 1200, 627),
    ("Pinterest Pin", 1000, 1500),
    ("YouTube Thumbnail", 1280, 720),
    ("Banner Ad - Medium Rectangle", 300, 250),
    ("Banner Ad - Leaderboard", 728, 90),
    ("Banner Ad - Skyscraper", 160, 600),
]
