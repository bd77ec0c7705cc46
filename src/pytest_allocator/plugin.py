"""pytest plugin for test allocation.

This module provides the pytest plugin hooks that expose the allocator on
the pytest command line. ``pytest --allocate`` writes the manifest and exits
without running any test.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pytest_allocator.config import load_config, merge_configs
from pytest_allocator.errors import AllocatorError
from pytest_allocator.reporting import ConsoleReporter
from pytest_allocator.service import allocate_tests


if TYPE_CHECKING:
    from pytest_allocator.config import AllocatorConfig


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add command-line options for pytest-allocator."""
    group = parser.getgroup('allocator', 'test allocation into parallel CI jobs')
    group.addoption(
        '--allocate',
        action='store_true',
        default=False,
        dest='allocate',
        help='Write a test allocation manifest and exit without running tests',
    )
    group.addoption(
        '--allocate-engine',
        action='store',
        default=None,
        dest='allocate_engine',
        help='How classes are weighed: pytest (tag marks) or suite (XML suite files)',
    )
    group.addoption(
        '--allocate-include-tags',
        action='store',
        default=None,
        dest='allocate_include_tags',
        help='Comma-separated tags; only methods with one of them are counted',
    )
    group.addoption(
        '--allocate-exclude-tags',
        action='store',
        default=None,
        dest='allocate_exclude_tags',
        help='Comma-separated tags; methods with any of them are not counted',
    )
    group.addoption(
        '--allocate-suites',
        action='store',
        default=None,
        dest='allocate_suites',
        help='Comma-separated suite names to allocate (suite engine)',
    )
    group.addoption(
        '--allocate-max-methods',
        action='store',
        type=int,
        default=None,
        dest='allocate_max_methods',
        help='Maximum test methods per job when classes must be combined (default: 20)',
    )
    group.addoption(
        '--allocate-max-runners',
        action='store',
        type=int,
        default=None,
        dest='allocate_max_runners',
        help='Number of parallel CI jobs available (default: 5)',
    )
    group.addoption(
        '--allocate-output',
        action='store',
        default=None,
        dest='allocate_output',
        help='Manifest path relative to the rootdir; .json is appended (default: test-allocation)',
    )
    group.addoption(
        '--allocate-test-dir',
        action='store',
        default=None,
        dest='allocate_test_dir',
        help='Directory holding the test modules (default: tests)',
    )
    group.addoption(
        '--allocate-by-class',
        action='store_true',
        default=False,
        dest='allocate_by_class',
        help='Weigh every class as one unit instead of by its test methods',
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the tag marker."""
    config.addinivalue_line('markers', 'tag(*names): tags used to filter tests during allocation')


def _build_config(config: pytest.Config) -> AllocatorConfig:
    option = config.option
    return merge_configs(
        load_config(config.rootpath),
        cli_engine=option.allocate_engine,
        cli_include_tags=option.allocate_include_tags,
        cli_exclude_tags=option.allocate_exclude_tags,
        cli_suites=option.allocate_suites,
        cli_max_methods=option.allocate_max_methods,
        cli_max_runners=option.allocate_max_runners,
        cli_output=option.allocate_output,
        cli_test_dir=option.allocate_test_dir,
        cli_by_class=option.allocate_by_class,
    )


def pytest_cmdline_main(config: pytest.Config) -> int | None:
    """Run the allocation instead of the test session when --allocate is given."""
    if not config.option.allocate:
        return None

    try:
        result = allocate_tests(_build_config(config))
    except AllocatorError as exc:
        raise pytest.UsageError(str(exc)) from exc

    reporter = ConsoleReporter()
    if result is None:
        reporter.output.write('pytest-allocator: disabled, no manifest written\n')
    else:
        reporter.write_report(result.manifest, result.output_path)
    return 0
