"""Test method metadata and tag filtering.

This package turns test classes into plain TestDescriptor values (name,
tags, whether the method is a test) and decides which descriptors survive
the configured include/exclude tag filters.
"""

from __future__ import annotations

from pytest_allocator.filtering.descriptor import TestDescriptor, describe_methods
from pytest_allocator.filtering.method_filter import count_matching, matches_tags
from pytest_allocator.filtering.tags import TAG_MARK, MetaMark, extract_tags


__all__ = [
    'TAG_MARK',
    'MetaMark',
    'TestDescriptor',
    'count_matching',
    'describe_methods',
    'extract_tags',
    'matches_tags',
]
