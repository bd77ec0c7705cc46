"""Tag extraction from pytest marks.

Tags are declared with the ``tag`` mark::

    @pytest.mark.tag('smoke', 'db')
    def test_login(self): ...

A mark can also stand for other tags when it is registered as a meta mark
(``[tool.pytest-allocator.meta-marks]``). A registered meta mark may itself
refer to further marks, so resolution is recursive; every mark is expanded
at most once, which keeps cyclic registrations finite.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping


TAG_MARK = 'tag'


@dataclass(frozen=True)
class MetaMark:
    """A mark that carries tags (and other marks) on behalf of the methods it decorates.

    Attributes:
        tags: Tags implied by the mark.
        marks: Names of further marks implied by the mark.
    """

    tags: frozenset[str] = frozenset()
    marks: tuple[str, ...] = ()


def iter_marks(obj: Callable[..., Any]) -> list[Any]:
    """Return the pytest marks stored on an object, in application order."""
    marks = getattr(obj, 'pytestmark', [])
    if not isinstance(marks, list):
        marks = [marks]
    # MarkDecorator instances wrap the Mark in a `mark` attribute
    return [getattr(mark, 'mark', mark) for mark in marks]


def _tag_values(args: Iterable[Any]) -> set[str]:
    return {arg for arg in args if isinstance(arg, str) and arg}


def _expand_meta_mark(
    name: str,
    meta_marks: Mapping[str, MetaMark],
    seen: set[str],
    tags: set[str],
) -> None:
    if name in seen or name not in meta_marks:
        return
    seen.add(name)
    meta = meta_marks[name]
    tags.update(meta.tags)
    for inner in meta.marks:
        _expand_meta_mark(inner, meta_marks, seen, tags)


def extract_tags(
    method: Callable[..., Any],
    meta_marks: Mapping[str, MetaMark] | None = None,
) -> frozenset[str]:
    """Collect the tags attached to a test method.

    Direct ``tag`` marks contribute their string arguments. Every other mark
    contributes the tags of its meta mark registration, if it has one. Marks
    that are neither are ignored.

    Args:
        method: The test function.
        meta_marks: Registered meta marks, keyed by mark name.

    Returns:
        The set of tags; empty when the method has none.

    Example:
        >>> import pytest
        >>> @pytest.mark.tag('smoke')
        ... def test_ping(): ...
        >>> sorted(extract_tags(test_ping))
        ['smoke']
    """
    tags: set[str] = set()
    seen: set[str] = set()
    registry = meta_marks or {}

    for mark in iter_marks(method):
        name = getattr(mark, 'name', None)
        if name == TAG_MARK:
            tags.update(_tag_values(getattr(mark, 'args', ())))
        elif isinstance(name, str):
            _expand_meta_mark(name, registry, seen, tags)

    return frozenset(tags)
