"""Shared pytest configuration for pytest-allocator tests."""

from __future__ import annotations

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register test size markers and the marks used by fixture classes."""
    config.addinivalue_line('markers', 'small: Fast, isolated unit tests (< 100ms)')
    config.addinivalue_line('markers', 'medium: Integration tests with real resources (< 10s)')

    # Marks placed on sample classes under test, expanded as meta marks
    for name in ('meta_annotated', 'outer', 'inner', 'cycle_a', 'cycle_b', 'fast_db', 'critical_path'):
        config.addinivalue_line('markers', f'{name}: sample meta mark used by allocator tests')
