"""Shared pytest fixtures for resize platform tests."""

from __future__ import annotations

import pytest

from resizeplatform.app.enums import ElementImportance, ElementType, FileFormat
from resizeplatform.app.models import (
    Design,
    DesignElement,
    ElementConstraints,
    Platform,
    PlatformDimension,
)


def make_element(
    elem_id: str,
    elem_type: ElementType = ElementType.SHAPE,
    x: float = 0,
    y: float = 0,
    width: float = 100,
    height: float = 100,
    importance: ElementImportance = ElementImportance.MEDIUM,
    **kwargs,
) -> DesignElement:
    return DesignElement(
        id=elem_id,
        type=elem_type,
        x=x,
        y=y,
        width=width,
        height=height,
        importance=importance,
        **kwargs,
    )


@pytest.fixture(name="make_element")
def make_element_fixture():
    """Factory for DesignElements with sensible defaults."""
    return make_element


@pytest.fixture
def sample_design() -> Design:
    """A 1200x800 banner with text, logo, image and one grouped cluster."""
    return Design(
        id="design_001",
        name="Spring Sale",
        width=1200,
        height=800,
        background_color="#FFFFFF",
        elements=[
            make_element(
                "headline_001", ElementType.TEXT, x=100, y=80, width=600, height=90,
                importance=ElementImportance.CRITICAL,
                content="Spring Sale Now On", font_size=60,
            ),
            make_element(
                "logo_001", ElementType.LOGO, x=1000, y=40, width=150, height=60,
                importance=ElementImportance.HIGH,
                constraints=ElementConstraints(lock_aspect_ratio=True),
            ),
            make_element(
                "hero_001", ElementType.IMAGE, x=600, y=250, width=500, height=500,
                importance=ElementImportance.MEDIUM,
            ),
            make_element(
                "badge_icon", ElementType.SHAPE, x=100, y=500, width=60, height=60,
                group_id="badge",
            ),
            make_element(
                "badge_text", ElementType.TEXT, x=170, y=510, width=200, height=40,
                group_id="badge", content="-30%", font_size=30,
            ),
        ],
    )


@pytest.fixture
def simple_design() -> Design:
    """A 1200x800 design with a single shape, no constraints."""
    return Design(
        id="design_simple",
        name="Simple",
        width=1200,
        height=800,
        elements=[make_element("box_001", x=100, y=100, width=200, height=100)],
    )


@pytest.fixture
def square_dimension() -> PlatformDimension:
    return PlatformDimension(
        width=1080,
        height=1080,
        name="Square Post",
        max_file_size_kb=10_000,
        supported_formats=[FileFormat.PNG, FileFormat.JPG],
    )


@pytest.fixture
def square_platform(square_dimension: PlatformDimension) -> Platform:
    return Platform(name="TestGram", dimensions=[square_dimension])
