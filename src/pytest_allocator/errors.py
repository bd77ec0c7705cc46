"""Fatal error types raised by the allocation pipeline.

Only conditions that must stop a run are modelled here. A class that cannot
be imported, or a suite include naming a method that does not exist, is not
an error: it simply contributes nothing to the allocation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path


class AllocatorError(Exception):
    """Base class for all fatal allocation errors."""


class ConfigurationError(AllocatorError, ValueError):
    """The allocator configuration is invalid."""


class UnsupportedEngineError(ConfigurationError):
    """The requested test engine is not one the allocator knows how to count."""

    def __init__(self, engine: str | None, supported: list[str]) -> None:
        self.engine = engine
        super().__init__(f'Unsupported test engine: {engine!r} (expected one of: {", ".join(supported)})')


class ClasspathError(AllocatorError):
    """A configured import root cannot be resolved, so classes cannot be loaded."""


class SuiteParseError(AllocatorError):
    """A suite description file is not valid XML.

    Attributes:
        path: The offending suite file.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f'Failed to parse suite file: {path} ({reason})')


class ManifestWriteError(AllocatorError):
    """The allocation manifest could not be written.

    Attributes:
        path: The destination that failed.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f'Failed to write allocation manifest to {path}: {reason}')
