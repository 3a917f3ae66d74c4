"""Abstract design repository."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import Design


class BaseDesignStore(ABC):
    """Abstract base class for design persistence."""

    @abstractmethod
    def load(self, design_id: str) -> Design:
        """Load a design by id.

        Args:
            design_id: Id of the design.

        Returns:
            The stored design.

        Raises:
            DesignNotFoundError: If no design has that id.
        """
        ...

    @abstractmethod
    def save(self, design: Design) -> None:
        """Insert or replace a design."""
        ...

    @abstractmethod
    def delete(self, design_id: str) -> bool:
        """Delete a design.

        Returns:
            True if a design was removed.
        """
        ...

    @abstractmethod
    def exists(self, design_id: str) -> bool:
        ...
