"""TestNG-style suite description files."""

from __future__ import annotations

from pytest_allocator.suites.model import ClassRef, Suite, SuiteTest
from pytest_allocator.suites.reader import find_suite_files, parse_suite_file


__all__ = ['ClassRef', 'Suite', 'SuiteTest', 'find_suite_files', 'parse_suite_file']
