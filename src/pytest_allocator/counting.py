"""Method-count strategies.

Each strategy turns a population of test classes into a mapping of class
name to effective test count, the weight the bucket allocator packs by.

Two engines are supported, selected once per run by ``TestEngine``:

* ``pytest``: every discovered class is weighed by the test methods that
  pass the include/exclude tag filters. Classes with no matching methods
  are left out of the mapping.
* ``suite``: only classes referenced by the configured suites of the
  project's suite files are weighed. A class referenced several times
  accumulates the counts of every reference.

With ``parallel_methods`` off, a class is a single indivisible unit and
weighs 1 regardless of how many of its methods run.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pytest_allocator.config import TestEngine
from pytest_allocator.filtering import count_matching, describe_methods
from pytest_allocator.suites import find_suite_files, parse_suite_file


if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Set
    from pathlib import Path

    from pytest_allocator.config import AllocatorConfig
    from pytest_allocator.discovery import TestClassLoader
    from pytest_allocator.filtering import MetaMark
    from pytest_allocator.suites import ClassRef


logger = logging.getLogger(__name__)


def count_by_tags(  # noqa: PLR0913
    class_names: Iterable[str],
    loader: TestClassLoader,
    include_tags: Set[str],
    exclude_tags: Set[str],
    parallel_methods: bool,
    meta_marks: Mapping[str, MetaMark] | None = None,
) -> dict[str, int]:
    """Weigh classes by their tag-filtered test methods.

    Args:
        class_names: Qualified names of the discovered classes.
        loader: Loader used to resolve the names.
        include_tags: A method must carry one of these (empty matches all).
        exclude_tags: A method carrying any of these is dropped.
        parallel_methods: Count matching methods (True) or weigh each class as 1.
        meta_marks: Registered meta marks for tag extraction.

    Returns:
        Mapping of class name to weight; classes that fail to load or have no
        matching method are absent.
    """
    counts: dict[str, int] = {}
    for class_name in class_names:
        cls = loader.load_class(class_name)
        if cls is None:
            logger.debug('Skipping %s: class not found', class_name)
            continue

        matching = count_matching(describe_methods(cls, meta_marks), include_tags, exclude_tags)
        if matching == 0:
            continue
        counts[class_name] = matching if parallel_methods else 1

    return counts


def _count_included(cls: type, included_methods: Iterable[str]) -> int:
    test_methods = {descriptor.name for descriptor in describe_methods(cls) if descriptor.is_test_method}
    return sum(1 for name in included_methods if name in test_methods)


def _count_class(cls: type, parallel_methods: bool) -> int:
    if not parallel_methods:
        return 1
    return sum(1 for descriptor in describe_methods(cls) if descriptor.is_test_method)


def _count_reference(ref: ClassRef, loader: TestClassLoader, parallel_methods: bool) -> int | None:
    cls = loader.load_class(ref.name)
    if cls is None:
        logger.debug('Skipping %s: class not found', ref.name)
        return None
    if ref.included_methods:
        return _count_included(cls, ref.included_methods)
    return _count_class(cls, parallel_methods)


def count_by_suites(
    suite_names: Set[str],
    project_root: Path,
    loader: TestClassLoader,
    parallel_methods: bool,
) -> dict[str, int]:
    """Weigh the classes referenced by the selected suites.

    Args:
        suite_names: Names of the suites to take classes from.
        project_root: Directory searched for suite files.
        loader: Loader used to resolve class references.
        parallel_methods: For references without an include list, count all
            test methods (True) or weigh the class as 1.

    Returns:
        Mapping of class name (as written in the suite file) to summed weight.

    Raises:
        SuiteParseError: If any suite file is malformed.
    """
    counts: dict[str, int] = {}
    for suite_file in find_suite_files(project_root):
        for suite in parse_suite_file(suite_file):
            if suite.name not in suite_names:
                continue
            logger.debug('Reading suite %r from %s', suite.name, suite_file)
            for test in suite.tests:
                for ref in test.classes:
                    weight = _count_reference(ref, loader, parallel_methods)
                    if weight is not None:
                        counts[ref.name] = counts.get(ref.name, 0) + weight
    return counts


def count_class_methods(
    config: AllocatorConfig,
    class_names: Iterable[str],
    loader: TestClassLoader,
) -> dict[str, int]:
    """Weigh classes with the strategy of the configured engine."""
    if config.engine is TestEngine.SUITE:
        return count_by_suites(config.suites, config.project_root, loader, config.parallel_methods)
    return count_by_tags(
        class_names,
        loader,
        config.include_tags,
        config.exclude_tags,
        config.parallel_methods,
        config.meta_marks,
    )
