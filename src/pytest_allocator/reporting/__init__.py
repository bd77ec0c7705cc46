"""Allocation manifest building, serialization and console summary."""

from __future__ import annotations

from pytest_allocator.reporting.console import ConsoleReporter
from pytest_allocator.reporting.manifest import ManifestEntry, ManifestWriter, build_manifest


__all__ = ['ConsoleReporter', 'ManifestEntry', 'ManifestWriter', 'build_manifest']
