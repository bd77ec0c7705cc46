"""In-memory tree of a parsed suite file: suites, their tests, and class references."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ClassRef:
    """A class referenced from a suite.

    Attributes:
        name: Qualified class name exactly as written in the file.
        included_methods: Method names listed under ``<include>``, or None
            when the whole class is referenced.
    """

    name: str
    included_methods: tuple[str, ...] | None = None


@dataclass(frozen=True)
class SuiteTest:
    """A ``<test>`` block of a suite."""

    __test__ = False

    name: str
    classes: tuple[ClassRef, ...] = ()


@dataclass(frozen=True)
class Suite:
    """A named ``<suite>``."""

    name: str
    tests: tuple[SuiteTest, ...] = ()
