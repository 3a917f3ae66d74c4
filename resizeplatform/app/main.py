"""Command-line entry point for batch resizing a design."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from .batch import BatchResizeOrchestrator
from .constants import STANDARD_DIMENSIONS
from .constraints import get_platform
from .enums import JobStatus
from .exceptions import ResizePlatformError, ValidationError
from .logging_config import setup_logging
from .models import Design, Platform, ResizeBatch
from .store import JsonDesignStore

logger = logging.getLogger("resizeplatform.main")


def parse_size(text: str) -> tuple[int, int]:
    """Parse ``"1080x1920"`` into (1080, 1920)."""
    parts = text.lower().split("x")
    if len(parts) != 2:
        raise ValidationError(f"Size must look like WIDTHxHEIGHT, got '{text}'")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError as e:
        raise ValidationError(f"Size must look like WIDTHxHEIGHT, got '{text}'") from e


def load_design(path: str | Path) -> Design:
    """Read a design JSON document.

    Raises:
        ValidationError: If the file is missing or not a valid design.
    """
    p = Path(path)
    if not p.exists():
        raise ValidationError(f"File not found: {path}")
    try:
        with p.open("r", encoding="utf-8") as f:
            return Design.from_dict(json.load(f))
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid design file '{path}': {e}") from e


def batch_summary(batch: ResizeBatch) -> dict[str, Any]:
    """Plain-dict view of a batch for display."""
    return {
        "id": batch.id,
        "name": batch.name,
        "source_design_id": batch.source_design_id,
        "status": batch.status.value,
        "progress": round(batch.progress, 4),
        "jobs": [
            {
                "id": job.id,
                "size": job.description,
                "status": job.status.value,
                "platform": job.platform.name if job.platform else None,
                "dimension": job.platform_dimension.name if job.platform_dimension else None,
                "output_design_id": job.output_design_id,
                "error": job.error_message,
                "manual_adjustment_reason": job.manual_adjustment_reason,
                "violations": [
                    {
                        "severity": v.severity.value,
                        "property": v.property_name,
                        "message": v.message,
                        "value": v.value,
                        "requirement": v.requirement,
                    }
                    for v in job.violations
                ],
            }
            for job in batch.jobs
        ],
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resizeplatform",
        description="Smart-resize a design to several target sizes.",
    )
    parser.add_argument("design", help="Path to a design JSON file")
    parser.add_argument(
        "--size", action="append", default=[], metavar="WxH",
        help="Target size, repeatable (e.g. --size 1080x1080)",
    )
    parser.add_argument(
        "--platform", action="append", default=[], metavar="NAME",
        help="Add every size of a catalog platform and validate against it",
    )
    parser.add_argument(
        "--standard", action="store_true",
        help="Add the standard social and display ad sizes",
    )
    parser.add_argument("--name", help="Batch name")
    parser.add_argument("--output-dir", help="Directory for resized design JSON files")
    parser.add_argument("--max-concurrent", type=int, default=None, help="Concurrent job limit")
    return parser


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    design = load_design(args.design)

    platforms: list[Platform] = []
    for name in args.platform:
        platform = get_platform(name)
        if platform is None:
            raise ValidationError(f"Unknown platform '{name}'")
        platforms.append(platform)

    targets = [parse_size(s) for s in args.size]
    if args.standard:
        targets.extend((w, h) for _, w, h in STANDARD_DIMENSIONS)
    for platform in platforms:
        targets.extend((d.width, d.height) for d in platform.dimensions)
    # Drop duplicates, keep order
    targets = list(dict.fromkeys(targets))

    store = JsonDesignStore(args.output_dir) if args.output_dir else None
    orchestrator = BatchResizeOrchestrator(store=store, max_concurrent_jobs=args.max_concurrent)

    batch = orchestrator.create_batch(
        design, targets, name=args.name, platforms=platforms or None
    )
    orchestrator.process_batch(batch.id)

    print(json.dumps(batch_summary(batch), indent=2))
    return 0 if batch.status == JobStatus.COMPLETED else 2


def main() -> None:
    """Main entry point."""
    # stdout carries the JSON summary
    setup_logging(os.environ.get("RESIZEPLATFORM_LOG_LEVEL", "INFO"), stream=sys.stderr)

    try:
        sys.exit(run())
    except ResizePlatformError as e:
        logger.error("Error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
