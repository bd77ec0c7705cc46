"""Reader for TestNG-style suite XML files.

Only the parts that decide which classes and methods run are read::

    <suite name="regression">
      <test name="api">
        <classes>
          <class name="tests.api.test_users.TestUsers">
            <methods>
              <include name="test_create"/>
            </methods>
          </class>
        </classes>
      </test>
    </suite>

Any other XML document yields no suites. A file that is not well-formed XML
is a hard error: a broken suite definition must never silently shrink the
allocation.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from xml.etree import ElementTree

from pytest_allocator.errors import SuiteParseError
from pytest_allocator.suites.model import ClassRef, Suite, SuiteTest


logger = logging.getLogger(__name__)

SUITE_FILE_SUFFIX = '.xml'
_PRUNED_DIRECTORIES = frozenset({'__pycache__', 'node_modules'})


def find_suite_files(project_root: Path) -> list[Path]:
    """Find every XML file below the project root.

    Hidden directories (``.git``, ``.venv``, ...) are not searched.

    Args:
        project_root: Directory to search recursively.

    Returns:
        Sorted list of XML file paths.
    """
    if not project_root.is_dir():
        return []

    found: list[Path] = []
    for directory, dirnames, filenames in os.walk(project_root):
        dirnames[:] = [d for d in dirnames if not d.startswith('.') and d not in _PRUNED_DIRECTORIES]
        found.extend(Path(directory) / name for name in filenames if name.endswith(SUITE_FILE_SUFFIX))
    return sorted(found)


def _parse_class(element: ElementTree.Element, path: Path) -> ClassRef:
    name = element.get('name')
    if not name:
        raise SuiteParseError(path, '<class> without a name attribute')

    methods = element.find('methods')
    if methods is None:
        return ClassRef(name=name)

    included = []
    for include in methods.iter('include'):
        method_name = include.get('name')
        if not method_name:
            raise SuiteParseError(path, f'<include> without a name attribute in class {name}')
        included.append(method_name)
    # An empty include list means the whole class, same as no <methods> at all
    return ClassRef(name=name, included_methods=tuple(included) or None)


def _parse_test(element: ElementTree.Element, path: Path) -> SuiteTest:
    classes = tuple(_parse_class(cls, path) for cls in element.iterfind('classes/class'))
    return SuiteTest(name=element.get('name', ''), classes=classes)


def parse_suite_file(path: Path) -> list[Suite]:
    """Parse one suite file.

    Args:
        path: The XML file.

    Returns:
        The suites defined in the file; empty when the document is not a suite.

    Raises:
        SuiteParseError: If the file cannot be read or is not well-formed.
    """
    try:
        root = ElementTree.parse(path).getroot()  # noqa: S314
    except (ElementTree.ParseError, OSError) as exc:
        raise SuiteParseError(path, str(exc)) from exc

    if root.tag != 'suite':
        logger.debug('Ignoring %s: root element is <%s>, not <suite>', path, root.tag)
        return []

    tests = tuple(_parse_test(test, path) for test in root.iterfind('test'))
    return [Suite(name=root.get('name', ''), tests=tests)]
