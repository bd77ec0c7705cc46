"""Packing weighted test classes into buckets."""

from __future__ import annotations

from pytest_allocator.grouping.allocator import group_classes, one_bucket_per_class
from pytest_allocator.grouping.bucket import TestBucket


__all__ = ['TestBucket', 'group_classes', 'one_bucket_per_class']
