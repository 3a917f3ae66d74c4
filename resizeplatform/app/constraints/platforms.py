"""Static catalog of publishing platforms."""

from __future__ import annotations

from ..enums import FileFormat, RequirementType
from ..models import Platform, PlatformDimension, SafeZone

_RASTER = [FileFormat.JPG, FileFormat.PNG]
_AD_FORMATS = [FileFormat.JPG, FileFormat.PNG, FileFormat.GIF, FileFormat.HTML5]


def _dim(width: int, height: int, name: str, **kwargs) -> PlatformDimension:
    return PlatformDimension(width=width, height=height, name=name, **kwargs)


PLATFORMS: list[Platform] = [
    Platform(
        name="Facebook",
        description="Feed posts and covers",
        dimensions=[
            _dim(1200, 630, "Feed Link"),
            _dim(1200, 1200, "Feed Square", requirement_type=RequirementType.RECOMMENDED),
            _dim(820, 312, "Page Cover", safe_zone=SafeZone(top=0, right=0, bottom=0, left=170)),
        ],
        default_max_file_size_kb=8192,
        default_supported_formats=_RASTER,
    ),
    Platform(
        name="Instagram",
        dimensions=[
            _dim(1080, 1080, "Square Post"),
            _dim(1080, 1350, "Portrait Post"),
            _dim(1080, 1920, "Story", safe_zone=SafeZone(top=250, right=0, bottom=250, left=0)),
        ],
        default_max_file_size_kb=8192,
        default_supported_formats=[FileFormat.JPG, FileFormat.PNG],
    ),
    Platform(
        name="Twitter",
        dimensions=[
            _dim(1200, 675, "Post"),
            _dim(1500, 500, "Header", safe_zone=SafeZone(top=60, right=60, bottom=60, left=60)),
        ],
        default_max_file_size_kb=5120,
        default_supported_formats=[FileFormat.JPG, FileFormat.PNG, FileFormat.GIF],
    ),
    Platform(
        name="LinkedIn",
        dimensions=[_dim(1200, 627, "Post"), _dim(1128, 191, "Company Cover")],
        default_max_file_size_kb=5120,
        default_supported_formats=_RASTER,
    ),
    Platform(
        name="Pinterest",
        dimensions=[_dim(1000, 1500, "Standard Pin")],
        default_max_file_size_kb=20480,
        default_supported_formats=_RASTER,
    ),
    Platform(
        name="YouTube",
        dimensions=[_dim(1280, 720, "Thumbnail", max_file_size_kb=2048)],
        default_max_file_size_kb=2048,
        default_supported_formats=[FileFormat.JPG, FileFormat.PNG, FileFormat.GIF],
    ),
    Platform(
        name="Google Display",
        description="IAB standard display ad units",
        dimensions=[
            _dim(300, 250, "Medium Rectangle"),
            _dim(728, 90, "Leaderboard"),
            _dim(160, 600, "Wide Skyscraper", requirement_type=RequirementType.RECOMMENDED),
        ],
        default_max_file_size_kb=150,
        default_supported_formats=_AD_FORMATS,
        default_safe_zone=SafeZone.uniform(4),
        logo_requirement=True,
        special_requirements=["Ads must have a visible border if the background is white"],
    ),
]


def get_platform(name: str, platforms: list[Platform] | None = None) -> Platform | None:
    """Look up a platform by case-insensitive name."""
    wanted = name.strip().lower()
    return next(
        (p for p in (platforms if platforms is not None else PLATFORMS) if p.name.lower() == wanted),
        None,
    )


def find_platform_dimension(
    platforms: list[Platform], width: float, height: float
) -> tuple[Platform, PlatformDimension] | None:
    """First platform slot matching ``width`` x ``height`` exactly."""
    if width != int(width) or height != int(height):
        return None
    for platform in platforms:
        dimension = platform.get_dimension(int(width), int(height))
        if dimension is not None:
            return platform, dimension
    return None
