"""Platform constraint checking for the resize platform."""

from .checker import PlatformConstraintChecker, estimate_file_size_kb
from .platforms import PLATFORMS, find_platform_dimension, get_platform

__all__ = [
    "PlatformConstraintChecker",
    "estimate_file_size_kb",
    "PLATFORMS",
    "find_platform_dimension",
    "get_platform",
]
