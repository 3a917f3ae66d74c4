"""Data structures for the resize platform."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .config import Config
from .enums import (
    ElementImportance,
    ElementType,
    FileFormat,
    JobStatus,
    PNGColorType,
    RequirementType,
    Severity,
)
from .validators import validate_insets, validate_jpeg_quality, validate_pixel_size


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Rect:
    """Axis-aligned rectangle in design coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height


@dataclass
class ElementConstraints:
    """Per-element resize policy. ``None`` means no constraint of that kind."""
    lock_aspect_ratio: bool = False
    min_width: float | None = None
    min_height: float | None = None
    max_width: float | None = None
    max_height: float | None = None
    keep_relative_position: bool = False
    margin_left: float | None = None
    margin_top: float | None = None
    margin_right: float | None = None
    margin_bottom: float | None = None
    align_to_parent: bool = False

    @property
    def has_margins(self) -> bool:
        return any(
            m is not None
            for m in (self.margin_left, self.margin_top, self.margin_right, self.margin_bottom)
        )

    def to_dict(self) -> dict[str, Any]:
        return dict(self.__dict__)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ElementConstraints:
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class DesignElement:
    """A single positioned element on a design canvas."""
    id: str
    type: ElementType
    x: float
    y: float
    width: float
    height: float
    importance: ElementImportance = ElementImportance.MEDIUM
    constraints: ElementConstraints = field(default_factory=ElementConstraints)
    content: str | None = None
    group_id: str | None = None
    z_index: int = 0
    opacity: float = 1.0
    rotation: float = 0.0

    # Text elements
    font_size: float | None = None
    font_family: str | None = None
    font_weight: str | None = None
    text_color: str | None = None
    text_alignment: str | None = None

    # Images and shapes
    background_color: str | None = None
    border_color: str | None = None
    border_width: float | None = None
    corner_radius: float | None = None

    # Asset-backed elements
    source_url: str | None = None

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.__dict__)
        data["type"] = self.type.value
        data["importance"] = self.importance.name.lower()
        data["constraints"] = self.constraints.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DesignElement:
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        known["type"] = ElementType(data["type"])
        known["importance"] = ElementImportance[
            str(data.get("importance", "medium")).upper()
        ]
        known["constraints"] = ElementConstraints.from_dict(data.get("constraints") or {})
        return cls(**known)


@dataclass
class Design:
    """A canvas of positioned elements at a fixed pixel size."""
    id: str
    name: str
    width: float
    height: float
    elements: list[DesignElement] = field(default_factory=list)
    background_color: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "elements": [e.to_dict() for e in self.elements],
            "background_color": self.background_color,
            "metadata": dict(self.metadata),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Design:
        now = utcnow()
        return cls(
            id=data.get("id") or new_id(),
            name=data.get("name", "Untitled"),
            width=data["width"],
            height=data["height"],
            elements=[DesignElement.from_dict(e) for e in data.get("elements", [])],
            background_color=data.get("background_color"),
            metadata=dict(data.get("metadata") or {}),
            created_at=(
                datetime.fromisoformat(data["created_at"]) if data.get("created_at") else now
            ),
            updated_at=(
                datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else now
            ),
        )


@dataclass
class SafeZone:
    """Insets from the canvas edges that important content should respect."""
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    def __post_init__(self) -> None:
        validate_insets(self.top, self.right, self.bottom, self.left)

    @classmethod
    def uniform(cls, inset: float) -> SafeZone:
        return cls(top=inset, right=inset, bottom=inset, left=inset)

    def inset(self, width: float, height: float) -> Rect:
        """Return the safe rectangle inside a ``width`` x ``height`` canvas."""
        return Rect(
            x=self.left,
            y=self.top,
            width=width - self.left - self.right,
            height=height - self.top - self.bottom,
        )


@dataclass
class PlatformDimension:
    """A named target size plus the constraints attached to it.

    ``max_file_size_kb``, ``supported_formats`` and ``safe_zone`` may be left
    unset, in which case the owning Platform's defaults apply.
    """
    width: int
    height: int
    name: str
    max_file_size_kb: int | None = None
    supported_formats: list[FileFormat] = field(default_factory=list)
    safe_zone: SafeZone | None = None
    requirement_type: RequirementType = RequirementType.REQUIRED
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        validate_pixel_size(self.width, self.height)

    @property
    def dimension_text(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass
class Platform:
    """A publishing platform with its dimensions and default constraints."""
    name: str
    dimensions: list[PlatformDimension] = field(default_factory=list)
    default_max_file_size_kb: int = 150
    default_supported_formats: list[FileFormat] = field(
        default_factory=lambda: [FileFormat.PNG, FileFormat.JPG]
    )
    default_safe_zone: SafeZone | None = None
    logo_requirement: bool = False
    description: str | None = None
    special_requirements: list[str] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @property
    def all_dimensions(self) -> list[str]:
        return [d.dimension_text for d in self.dimensions]

    def get_dimension(self, width: int, height: int) -> PlatformDimension | None:
        return next(
            (d for d in self.dimensions if d.width == width and d.height == height),
            None,
        )

    def get_dimension_by_text(self, dimension_text: str) -> PlatformDimension | None:
        parts = dimension_text.lower().split("x")
        if len(parts) != 2:
            return None
        try:
            width, height = int(parts[0]), int(parts[1])
        except ValueError:
            return None
        return self.get_dimension(width, height)

    def max_file_size_for(self, dimension: PlatformDimension) -> int:
        if dimension.max_file_size_kb is not None:
            return dimension.max_file_size_kb
        return self.default_max_file_size_kb

    def formats_for(self, dimension: PlatformDimension) -> list[FileFormat]:
        return list(dimension.supported_formats or self.default_supported_formats)

    def safe_zone_for(self, dimension: PlatformDimension) -> SafeZone | None:
        return dimension.safe_zone if dimension.safe_zone is not None else self.default_safe_zone


@dataclass
class ExportSettings:
    """Export format plus format-specific encoder knobs."""
    format: FileFormat
    jpeg_quality: int = Config.DEFAULT_JPEG_QUALITY  # 0-100
    png_color_type: PNGColorType = PNGColorType.RGBA
    include_metadata: bool = True
    optimize_for_web: bool = True

    def __post_init__(self) -> None:
        validate_jpeg_quality(self.jpeg_quality)

    @classmethod
    def default_web_export(cls) -> ExportSettings:
        return cls(
            format=FileFormat.PNG,
            jpeg_quality=Config.DEFAULT_JPEG_QUALITY,
            png_color_type=PNGColorType.RGBA,
            include_metadata=False,
        )

    @classmethod
    def minimum_size_settings(cls, file_format: FileFormat) -> ExportSettings:
        """Settings tuned for the smallest output in ``file_format``."""
        if file_format in (FileFormat.JPG, FileFormat.JPEG):
            return cls(
                format=file_format,
                jpeg_quality=Config.MIN_SIZE_JPEG_QUALITY,
                include_metadata=False,
            )
        if file_format in (FileFormat.PNG, FileFormat.PNG8):
            return cls(
                format=file_format,
                png_color_type=PNGColorType.INDEXED,
                include_metadata=False,
            )
        return cls(format=file_format, include_metadata=False)


@dataclass(frozen=True)
class ConstraintViolation:
    """A single platform constraint violation."""
    message: str
    severity: Severity
    property_name: str
    value: str
    requirement: str


@dataclass
class ResizeJob:
    """One source design retargeted to one size."""
    source_design_id: str
    target_width: float
    target_height: float
    id: str = field(default_factory=new_id)
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None
    output_design_id: str | None = None
    output_design: Design | None = None
    draft_design: Design | None = None  # Automated output held for manual adjustment
    error_message: str | None = None
    platform: Platform | None = None
    platform_dimension: PlatformDimension | None = None
    export_settings: ExportSettings | None = None
    requires_manual_adjustment: bool = False
    manual_adjustment_reason: str | None = None
    violations: list[ConstraintViolation] = field(default_factory=list)

    @property
    def description(self) -> str:
        return f"{int(self.target_width)}x{int(self.target_height)}"

    def touch(self) -> None:
        self.updated_at = utcnow()


@dataclass
class ResizeBatch:
    """A set of resize jobs fanned out from one source design.

    ``status`` and ``progress`` are always computed from the jobs.
    """
    name: str
    source_design_id: str
    jobs: list[ResizeJob] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    created_by: str | None = None

    @property
    def completed_count(self) -> int:
        return sum(1 for j in self.jobs if j.status == JobStatus.COMPLETED)

    @property
    def progress(self) -> float:
        if not self.jobs:
            return 0.0
        return self.completed_count / len(self.jobs)

    @property
    def status(self) -> JobStatus:
        statuses = [j.status for j in self.jobs]
        if not statuses:
            return JobStatus.QUEUED
        if JobStatus.WAITING_FOR_ADJUSTMENT in statuses:
            return JobStatus.WAITING_FOR_ADJUSTMENT
        if JobStatus.PROCESSING in statuses:
            return JobStatus.PROCESSING
        if all(s == JobStatus.COMPLETED for s in statuses):
            return JobStatus.COMPLETED
        if all(s == JobStatus.CANCELLED for s in statuses):
            return JobStatus.CANCELLED
        if JobStatus.FAILED in statuses:
            return JobStatus.FAILED
        return JobStatus.QUEUED

    @property
    def is_finished(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.CANCELLED)

    def job(self, job_id: str) -> ResizeJob | None:
        return next((j for j in self.jobs if j.id == job_id), None)

    def touch(self) -> None:
        self.updated_at = utcnow()
