"""Plain descriptions of the methods a test class declares.

The counting strategies never look at functions or marks themselves; they
work on TestDescriptor values produced here. Only methods declared in the
class body are described; inherited methods belong to the class that
declares them.
"""

from __future__ import annotations

from dataclasses import dataclass
import inspect
from typing import TYPE_CHECKING, Any

from pytest_allocator.filtering.tags import extract_tags


if TYPE_CHECKING:
    from collections.abc import Mapping

    from pytest_allocator.filtering.tags import MetaMark


TEST_METHOD_PREFIX = 'test'


@dataclass(frozen=True)
class TestDescriptor:
    """What the allocator needs to know about one method.

    Attributes:
        name: Method name as declared.
        tags: Tags attached to the method (possibly via meta marks).
        is_test_method: Whether the runner would execute the method as a test.
    """

    __test__ = False

    name: str
    tags: frozenset[str] = frozenset()
    is_test_method: bool = False


def _unwrap(attribute: Any) -> Any:
    if isinstance(attribute, (staticmethod, classmethod)):
        return attribute.__func__
    return attribute


def describe_methods(
    cls: type,
    meta_marks: Mapping[str, MetaMark] | None = None,
) -> list[TestDescriptor]:
    """Describe every function declared directly on ``cls``.

    Args:
        cls: The test class.
        meta_marks: Registered meta marks, used for tag extraction.

    Returns:
        One descriptor per declared function, in declaration order.
    """
    descriptors = []
    for name, attribute in vars(cls).items():
        func = _unwrap(attribute)
        if not inspect.isfunction(func):
            continue
        descriptors.append(
            TestDescriptor(
                name=name,
                tags=extract_tags(func, meta_marks),
                is_test_method=name.startswith(TEST_METHOD_PREFIX),
            )
        )
    return descriptors
