"""Include/exclude tag filtering for test methods."""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable, Set

    from pytest_allocator.filtering.descriptor import TestDescriptor


def matches_tags(tags: Set[str], include_tags: Set[str], exclude_tags: Set[str]) -> bool:
    """Return True if a method with ``tags`` passes the filters.

    An empty include set matches every method. Any overlap with the exclude
    set rejects the method, even when it also carries an included tag.

    Example:
        >>> matches_tags({'smoke', 'slow'}, {'smoke'}, {'slow'})
        False
        >>> matches_tags({'smoke'}, set(), set())
        True
    """
    if include_tags and tags.isdisjoint(include_tags):
        return False
    return tags.isdisjoint(exclude_tags)


def count_matching(
    descriptors: Iterable[TestDescriptor],
    include_tags: Set[str],
    exclude_tags: Set[str],
) -> int:
    """Count the test methods among ``descriptors`` that pass the tag filters."""
    return sum(
        1
        for descriptor in descriptors
        if descriptor.is_test_method and matches_tags(descriptor.tags, include_tags, exclude_tags)
    )
