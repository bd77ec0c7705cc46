"""Root pytest configuration for pytest-allocator.

Tests are sized by directory: tests/small holds the isolated unit tests
(fake loaders and counters, tmp_path files), tests/medium the runs that
import real modules or drive ``pytest --allocate`` through pytester. Doctests
in ``src`` (the packing, tag filter and config examples, collected with
``--doctest-modules``) count as small. Marker registration lives in
tests/conftest.py.
"""

from __future__ import annotations

from pathlib import Path

import pytest


SIZE_MARKERS = ('small', 'medium')


def _has_size_marker(item: pytest.Item) -> bool:
    return any(marker.name in SIZE_MARKERS for marker in item.iter_markers())


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config,  # noqa: ARG001
    items: list[pytest.Item],
) -> None:
    """Apply a size marker based on where the test lives.

    Tests that already carry a size marker are left alone.
    """
    for item in items:
        if _has_size_marker(item):
            continue

        path_parts = Path(str(item.fspath)).parts
        if 'small' in path_parts:
            item.add_marker(pytest.mark.small)
        elif 'medium' in path_parts:
            item.add_marker(pytest.mark.medium)
        elif 'src' in path_parts:
            item.add_marker(pytest.mark.small)
