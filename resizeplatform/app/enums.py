"""Enumerations shared across the resize platform."""

from __future__ import annotations

from enum import Enum, IntEnum


class ElementType(Enum):
    """Kinds of design elements."""
    TEXT = "text"
    IMAGE = "image"
    SHAPE = "shape"
    LOGO = "logo"
    GROUP = "group"


class ElementImportance(IntEnum):
    """Ordinal priority of an element (higher = more important)."""
    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CRITICAL = 3


class FileFormat(Enum):
    """Export file formats accepted by publishing platforms."""
    JPG = "jpg"
    JPEG = "jpeg"
    PNG = "png"
    PNG8 = "png8"  # 8-bit indexed PNG
    GIF = "gif"
    SVG = "svg"
    HTML5 = "html5"

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]

    @property
    def file_extension(self) -> str:
        return _EXTENSIONS[self]


_MIME_TYPES = {
    FileFormat.JPG: "image/jpeg",
    FileFormat.JPEG: "image/jpeg",
    FileFormat.PNG: "image/png",
    FileFormat.PNG8: "image/png",
    FileFormat.GIF: "image/gif",
    FileFormat.SVG: "image/svg+xml",
    FileFormat.HTML5: "text/html",
}

_EXTENSIONS = {
    FileFormat.JPG: "jpg",
    FileFormat.JPEG: "jpeg",
    FileFormat.PNG: "png",
    FileFormat.PNG8: "png",
    FileFormat.GIF: "gif",
    FileFormat.SVG: "svg",
    FileFormat.HTML5: "html",
}


class PNGColorType(Enum):
    """PNG color modes."""
    INDEXED = "indexed"  # PNG-8
    RGB = "rgb"  # PNG-24
    RGBA = "rgba"  # PNG-32


class RequirementType(Enum):
    """How strongly a platform asks for a given dimension."""
    REQUIRED = "required"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


class Severity(Enum):
    """Severity of a constraint violation."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class JobStatus(Enum):
    """Lifecycle states of a resize job (and derived batch status)."""
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    WAITING_FOR_ADJUSTMENT = "waitingForAdjustment"
    CANCELLED = "cancelled"
