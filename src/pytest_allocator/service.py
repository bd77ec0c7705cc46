"""Allocation pipeline.

Runs one allocation from configuration to manifest:

1. Create the class loader (fails fast if an import root is missing).
2. Discover test classes (pytest engine only; the suite engine takes its
   classes from the suite files).
3. Weigh the classes with the engine's method-count strategy.
4. Build buckets: one per class when there are no more classes than
   runners, otherwise first-fit-decreasing packing by method count.
5. Number the buckets as jobs and write the JSON manifest.

Every failure is fatal and propagates with its stage and input in the
message; nothing is retried.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

from pytest_allocator.config import TestEngine
from pytest_allocator.counting import count_class_methods
from pytest_allocator.discovery import TestClassLoader, discover_classes
from pytest_allocator.grouping import group_classes, one_bucket_per_class
from pytest_allocator.reporting import ManifestWriter, build_manifest


if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from pathlib import Path

    from pytest_allocator.config import AllocatorConfig
    from pytest_allocator.grouping import TestBucket
    from pytest_allocator.reporting import ManifestEntry

    MethodCounter = Callable[[AllocatorConfig, list[str], TestClassLoader], dict[str, int]]


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllocationResult:
    """Outcome of one allocation run.

    Attributes:
        counts: Effective test count per class.
        buckets: Buckets in job order.
        manifest: Manifest entries written to ``output_path``.
        output_path: The manifest file.
    """

    counts: dict[str, int]
    buckets: list[TestBucket]
    manifest: list[ManifestEntry]
    output_path: Path


def build_buckets(counts: Mapping[str, int], max_parallel_runners: int, max_methods_per_bucket: int) -> list[TestBucket]:
    """Choose the bucket layout for the weighed classes.

    When every class can have a runner of its own, classes are not combined
    and ``max_methods_per_bucket`` is not consulted, even for a class heavier
    than the capacity.

    Args:
        counts: Effective test count per class.
        max_parallel_runners: Number of CI jobs available.
        max_methods_per_bucket: Capacity used when classes must be packed.

    Returns:
        Buckets in job order.
    """
    if len(counts) <= max_parallel_runners:
        return one_bucket_per_class(counts)
    return group_classes(counts, max_methods_per_bucket)


def _log_configuration(config: AllocatorConfig) -> None:
    logger.info('Starting test allocation')
    logger.info('testEngine = %s', config.engine.value)
    if config.engine is TestEngine.SUITE:
        logger.info('suites = %s', ', '.join(sorted(config.suites)))
    else:
        logger.info('testDir = %s', config.test_directory)
        logger.info('tagsInclude = %s', ', '.join(sorted(config.include_tags)))
        logger.info('tagsExclude = %s', ', '.join(sorted(config.exclude_tags)))
    logger.info('parallelMethods = %s', config.parallel_methods)
    logger.info('maxMethods = %d', config.max_methods_per_bucket)
    logger.info('maxParallelRunners = %d', config.max_parallel_runners)
    logger.info('outputFile = %s', config.output_path)


def allocate_tests(
    config: AllocatorConfig,
    loader: TestClassLoader | None = None,
    counter: MethodCounter = count_class_methods,
) -> AllocationResult | None:
    """Allocate the project's test classes into jobs and write the manifest.

    Args:
        config: The run configuration.
        loader: Class loader to use; created from ``config`` when omitted.
        counter: Method-count strategy; defaults to the configured engine's.

    Returns:
        The allocation, or None when allocation is disabled.

    Raises:
        ClasspathError: If an import root is missing.
        SuiteParseError: If a suite file is malformed.
        ManifestWriteError: If the manifest cannot be written.
    """
    if not config.enabled:
        logger.info('Disabled. Skipping test allocation.')
        return None

    _log_configuration(config)

    if loader is None:
        loader = TestClassLoader.from_config(config)

    with loader:
        class_names: list[str] = []
        if config.engine is TestEngine.PYTEST:
            class_names = discover_classes(config.test_directory, config.import_roots())
            logger.info('Found %d test classes in %s', len(class_names), config.test_directory)
        counts = counter(config, class_names, loader)

    logger.info('classMethodCount size=%d', len(counts))

    buckets = build_buckets(counts, config.max_parallel_runners, config.max_methods_per_bucket)
    manifest = build_manifest(buckets)

    output_path = config.output_path
    ManifestWriter().write_manifest(manifest, output_path)

    return AllocationResult(counts=counts, buckets=buckets, manifest=manifest, output_path=output_path)
