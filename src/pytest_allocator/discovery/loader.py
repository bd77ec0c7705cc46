"""Loading test classes by their qualified names.

TestClassLoader imports the module part of a qualified class name and walks
the remaining attributes down to the class. Import roots from the
configuration are put on ``sys.path`` for the duration of a ``with`` block,
much like pytest's own ``pythonpath`` setting.

Example:
    >>> from pathlib import Path
    >>> loader = TestClassLoader([Path.cwd()])
    >>> with loader:
    ...     loader.load_class('collections.OrderedDict')
    <class 'collections.OrderedDict'>
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import TYPE_CHECKING

import pytest

from pytest_allocator.errors import ClasspathError


if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path
    import types

    from pytest_allocator.config import AllocatorConfig


logger = logging.getLogger(__name__)

# Nested classes may be written Outer$Inner, as in suite files shared with JVM projects
NESTED_CLASS_SEPARATOR = '$'


class TestClassLoader:
    """Resolves qualified class names to class objects.

    A name that cannot be resolved is not an error: ``load_class`` returns
    None and the caller skips the class. This includes modules that raise
    while being imported or skip themselves with ``pytest.importorskip``.
    """

    __test__ = False

    def __init__(self, roots: Sequence[Path]) -> None:
        """Initialize the loader.

        Args:
            roots: Directories to import test modules from.
        """
        self._roots = [str(root) for root in roots]
        self._inserted: list[str] = []

    @classmethod
    def from_config(cls, config: AllocatorConfig) -> TestClassLoader:
        """Create a loader for the configured import roots.

        Raises:
            ClasspathError: If any import root does not exist.
        """
        roots = config.import_roots()
        missing = [root for root in roots if not root.is_dir()]
        if missing:
            raise ClasspathError(
                'Cannot create class loader: import roots do not exist: ' + ', '.join(str(root) for root in missing)
            )
        return cls(roots)

    @property
    def roots(self) -> list[str]:
        """Import roots, as placed on sys.path."""
        return list(self._roots)

    def __enter__(self) -> TestClassLoader:
        for root in reversed(self._roots):
            if root not in sys.path:
                sys.path.insert(0, root)
                self._inserted.append(root)
        importlib.invalidate_caches()
        return self

    def __exit__(self, *args: object) -> None:
        for root in self._inserted:
            if root in sys.path:
                sys.path.remove(root)
        self._inserted = []

    def load_class(self, class_name: str) -> type | None:
        """Load a class by its qualified name.

        The longest importable prefix of the name is taken as the module; the
        rest is looked up as nested attributes.

        Args:
            class_name: Name such as ``pkg.test_mod.TestOuter.TestInner`` or
                ``pkg.test_mod.TestOuter$TestInner``.

        Returns:
            The class, or None if it cannot be found.
        """
        parts = class_name.replace(NESTED_CLASS_SEPARATOR, '.').split('.')
        if len(parts) < 2 or not all(parts):  # noqa: PLR2004
            return None

        for split in range(len(parts) - 1, 0, -1):
            module_name = '.'.join(parts[:split])
            try:
                module = importlib.import_module(module_name)
            except ModuleNotFoundError as exc:
                if exc.name is not None and (exc.name == module_name or module_name.startswith(exc.name + '.')):
                    # This prefix is not a module; try a shorter one
                    continue
                logger.debug('Cannot load %s: %s', class_name, exc)
                return None
            except (Exception, pytest.skip.Exception) as exc:
                # Importing runs module code: errors and module-level skips only mean "not found"
                logger.debug('Cannot load %s: %s', class_name, exc)
                return None
            return _resolve_attributes(module, parts[split:])

        return None


def _resolve_attributes(module: types.ModuleType, attributes: list[str]) -> type | None:
    obj: object = module
    for attribute in attributes:
        obj = getattr(obj, attribute, None)
        if obj is None:
            return None
    return obj if isinstance(obj, type) else None
