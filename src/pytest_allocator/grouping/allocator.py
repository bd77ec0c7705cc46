"""Bucket allocation strategies.

``group_classes`` is a first-fit-decreasing packer with a single open
bucket: classes are taken heaviest first and appended to the open bucket
while it stays within capacity; otherwise the bucket is closed and a new one
is opened with the class. Ties keep their input order.

A class heavier than the capacity is never split or rejected; it simply
ends up alone in its bucket. A class of weight 0 is still placed, so every
input class appears in exactly one bucket.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pytest_allocator.grouping.bucket import TestBucket


if TYPE_CHECKING:
    from collections.abc import Mapping


def group_classes(counts: Mapping[str, int], max_per_bucket: int) -> list[TestBucket]:
    """Pack classes into buckets of at most ``max_per_bucket`` methods.

    Args:
        counts: Mapping of class name to effective test count.
        max_per_bucket: Bucket capacity. With a capacity of zero or less,
            every class with methods gets a bucket of its own.

    Returns:
        Buckets in the order they were opened; empty for empty input.

    Example:
        >>> buckets = group_classes({'Class1': 12, 'Class2': 10, 'Class3': 5}, 15)
        >>> [(b.class_names, b.total_methods) for b in buckets]
        [(['Class1'], 12), (['Class2', 'Class3'], 15)]
    """
    # sorted() is stable, so equal weights keep their input order
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)

    buckets: list[TestBucket] = []
    current = TestBucket()

    for class_name, method_count in ordered:
        if not current.fits(method_count, max_per_bucket) and not current.is_empty:
            buckets.append(current)
            current = TestBucket()
        current.add(class_name, method_count)

    if not current.is_empty:
        buckets.append(current)

    return buckets


def one_bucket_per_class(counts: Mapping[str, int]) -> list[TestBucket]:
    """Give every class its own bucket, in input order.

    Used when there are no more classes than runners, so nothing needs to be
    combined.
    """
    buckets = []
    for class_name, method_count in counts.items():
        bucket = TestBucket()
        bucket.add(class_name, method_count)
        buckets.append(bucket)
    return buckets
