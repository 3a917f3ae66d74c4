"""Batch resize orchestration for the resize platform."""

from .orchestrator import BatchResizeOrchestrator

__all__ = ["BatchResizeOrchestrator"]
