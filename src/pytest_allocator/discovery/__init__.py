"""Test class discovery and loading."""

from __future__ import annotations

from pytest_allocator.discovery.finder import (
    discover_classes,
    find_test_classes,
    find_test_files,
    path_to_module_name,
)
from pytest_allocator.discovery.loader import TestClassLoader


__all__ = [
    'TestClassLoader',
    'discover_classes',
    'find_test_classes',
    'find_test_files',
    'path_to_module_name',
]
