"""Test class finder.

This module locates test modules on disk and lists the test classes they
define, without importing anything. Class names are fully qualified:
``package.test_module.TestOuter`` and, for nested classes,
``package.test_module.TestOuter.TestInner``.
"""

from __future__ import annotations

import ast
import logging
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path


logger = logging.getLogger(__name__)

TEST_CLASS_PREFIX = 'Test'


def is_test_module(path: Path) -> bool:
    """Return True for files pytest would collect as test modules."""
    name = path.name
    return name.endswith('.py') and (name.startswith('test_') or name.endswith('_test.py'))


def find_test_files(root: Path) -> list[Path]:
    """Find all test modules below ``root``.

    Args:
        root: Directory to search recursively.

    Returns:
        Sorted list of test module paths; empty if ``root`` does not exist.
    """
    if not root.is_dir():
        return []
    return sorted(path for path in root.rglob('*.py') if path.is_file() and is_test_module(path))


def path_to_module_name(file_path: Path, rootdir: Path) -> str:
    """Convert a file path to its importable module name.

    A leading ``src`` directory is dropped, since src-layout packages are
    imported without it, and ``__init__`` modules are named after their package.

    Example:
        >>> from pathlib import Path
        >>> path_to_module_name(Path('/p/tests/api/test_users.py'), Path('/p'))
        'tests.api.test_users'
    """
    relative = file_path.relative_to(rootdir).with_suffix('')
    parts = list(relative.parts)
    if len(parts) > 1 and parts[0] == 'src':
        parts = parts[1:]
    if len(parts) > 1 and parts[-1] == '__init__':
        parts = parts[:-1]
    return '.'.join(parts)


class TestClassVisitor(ast.NodeVisitor):
    """AST visitor that collects qualified names of test classes."""

    __test__ = False

    def __init__(self, module_name: str) -> None:
        self.class_names: list[str] = []
        self._scope: list[str] = [module_name]

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        """Record test classes and descend into their bodies for nested ones."""
        if not node.name.startswith(TEST_CLASS_PREFIX):
            return
        self._scope.append(node.name)
        self.class_names.append('.'.join(self._scope))
        self.generic_visit(node)
        self._scope.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        """Classes defined inside functions are not importable; skip them."""

    visit_AsyncFunctionDef = visit_FunctionDef  # type: ignore[assignment]  # noqa: N815


def find_test_classes(path: Path, module_name: str) -> list[str]:
    """List the test classes defined in a module, in source order.

    Args:
        path: The module file.
        module_name: Importable name of the module.

    Returns:
        Qualified class names; empty when the file cannot be read or parsed.
    """
    try:
        tree = ast.parse(path.read_text(encoding='utf-8'), filename=str(path))
    except (OSError, SyntaxError, UnicodeDecodeError, ValueError):
        logger.debug('Skipping unparseable test module %s', path)
        return []

    visitor = TestClassVisitor(module_name)
    visitor.visit(tree)
    return visitor.class_names


def discover_classes(test_dir: Path, import_roots: list[Path]) -> list[str]:
    """Discover every test class below ``test_dir``.

    Module names are computed relative to the deepest import root that
    contains the module.

    Args:
        test_dir: Directory holding the test modules.
        import_roots: Roots modules are importable from; the deepest match wins.

    Returns:
        Qualified class names, grouped by module in path order.
    """
    class_names: list[str] = []
    for path in find_test_files(test_dir):
        root = _closest_root(path, import_roots)
        if root is None:
            logger.debug('Skipping %s: not below any import root', path)
            continue
        class_names.extend(find_test_classes(path, path_to_module_name(path, root)))
    return class_names


def _closest_root(path: Path, import_roots: list[Path]) -> Path | None:
    candidates = [root for root in import_roots if path.is_relative_to(root)]
    if not candidates:
        return None
    return max(candidates, key=lambda root: len(root.parts))
