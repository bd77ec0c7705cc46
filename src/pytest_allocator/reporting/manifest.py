"""Allocation manifest for CI job matrices.

The manifest is a JSON array with one object per job, in bucket order:

    [
        {"jobIndex": 0, "classes": ["tests.test_a.TestA", "tests.test_b.TestB"], "totalMethods": 15},
        {"jobIndex": 1, "classes": ["tests.test_c.TestC"], "totalMethods": 20}
    ]
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import TYPE_CHECKING, Any

from pytest_allocator.errors import ManifestWriteError


if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from pytest_allocator.grouping import TestBucket


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestEntry:
    """One CI job of the allocation.

    Attributes:
        job_index: Zero-based position of the job.
        classes: Classes the job runs.
        total_methods: Combined weight of the classes.
    """

    job_index: int
    classes: tuple[str, ...]
    total_methods: int

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON representation of the entry."""
        return {
            'jobIndex': self.job_index,
            'classes': list(self.classes),
            'totalMethods': self.total_methods,
        }


def build_manifest(buckets: Sequence[TestBucket]) -> list[ManifestEntry]:
    """Number the buckets as jobs, in order."""
    return [
        ManifestEntry(job_index=index, classes=tuple(bucket.class_names), total_methods=bucket.total_methods)
        for index, bucket in enumerate(buckets)
    ]


class ManifestWriter:
    """Serializes allocation manifests to JSON."""

    def to_json(self, entries: Sequence[ManifestEntry]) -> str:
        """Convert manifest entries to a JSON string.

        Args:
            entries: The manifest entries, in job order.

        Returns:
            Pretty-printed JSON array.
        """
        return json.dumps([entry.to_dict() for entry in entries], indent=2)

    def write_manifest(self, entries: Sequence[ManifestEntry], output_path: Path) -> None:
        """Write the manifest to a file, creating parent directories.

        The write is attempted once; there is no retry.

        Args:
            entries: The manifest entries to write.
            output_path: Destination JSON file.

        Raises:
            ManifestWriteError: If the file cannot be written.
        """
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(self.to_json(entries), encoding='utf-8')
        except OSError as exc:
            raise ManifestWriteError(output_path, str(exc)) from exc
        logger.info('Wrote %d jobs to %s', len(entries), output_path)
