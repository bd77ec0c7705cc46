"""pytest-allocator: Split a test suite into balanced CI jobs.

pytest-allocator counts the test methods each test class will actually run
(after tag or suite filtering) and packs the classes into buckets, one per
parallel CI job. The resulting manifest is a JSON array that a CI job matrix
can expand.

Example:
    Allocate the classes under ``tests/`` into jobs of at most 30 methods::

        $ pytest --allocate --allocate-max-methods=30

    Only count methods tagged ``smoke`` but not ``slow``::

        $ pytest --allocate --allocate-include-tags=smoke --allocate-exclude-tags=slow

    Allocate the classes referenced by TestNG-style suite files::

        $ pytest --allocate --allocate-engine=suite --allocate-suites=regression
"""

from __future__ import annotations


__version__ = '1.0.0'
__all__ = ['__version__']
