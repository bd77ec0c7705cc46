"""Configuration loading for pytest-allocator.

This module reads configuration from pyproject.toml [tool.pytest-allocator]
section, merges command-line overrides on top of it, and provides sensible
defaults when configuration is absent.

Example pyproject.toml section::

    [tool.pytest-allocator]
    engine = "pytest"
    test-dir = "tests"
    include-tags = ["smoke"]
    exclude-tags = ["slow"]
    max-methods-per-bucket = 30
    max-parallel-runners = 8
    output-file = "build/test-allocation"

    [tool.pytest-allocator.meta-marks.db_smoke]
    tags = ["db", "smoke"]
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
import tomllib
from typing import Any

from pytest_allocator.errors import ConfigurationError, UnsupportedEngineError
from pytest_allocator.filtering.tags import MetaMark


DEFAULT_MAX_METHODS_PER_BUCKET = 20
DEFAULT_MAX_PARALLEL_RUNNERS = 5
DEFAULT_OUTPUT_FILE = 'test-allocation'
DEFAULT_TEST_DIR = 'tests'


class TestEngine(Enum):
    """Supported ways of measuring a test class.

    Attributes:
        PYTEST: Count test methods by their ``tag`` marks (include/exclude filters).
        SUITE: Count test methods referenced by TestNG-style XML suite files.
    """

    __test__ = False

    PYTEST = 'pytest'
    SUITE = 'suite'


def parse_engine(name: str | None) -> TestEngine:
    """Resolve an engine name, case-insensitively.

    Raises:
        UnsupportedEngineError: If the name does not match a known engine.
    """
    normalized = (name or '').strip().lower()
    for engine in TestEngine:
        if engine.value == normalized:
            return engine
    raise UnsupportedEngineError(name, [engine.value for engine in TestEngine])


def parse_csv(value: str | list[str] | None) -> frozenset[str]:
    """Split a comma-separated value into a set of trimmed, non-empty entries.

    Lists (as found in pyproject.toml) are trimmed the same way.

    Raises:
        ConfigurationError: If the value is neither a string nor a list of strings.

    Example:
        >>> sorted(parse_csv(' smoke, integration , '))
        ['integration', 'smoke']
        >>> parse_csv(None)
        frozenset()
    """
    if value is None:
        return frozenset()
    if isinstance(value, str):
        items = value.split(',')
    elif isinstance(value, list) and all(isinstance(item, str) for item in value):
        items = value
    else:
        raise ConfigurationError(f'expected a comma-separated string or a list of strings, got {value!r}')
    return frozenset(item.strip() for item in items if item and item.strip())


@dataclass(frozen=True)
class AllocatorConfig:
    """Everything one allocation run needs.

    Attributes:
        project_root: Directory the run is anchored to (pytest rootdir).
        enabled: When False the run logs and does nothing.
        engine: Which method-count strategy to use.
        test_dir: Directory, relative to project_root, holding the test modules.
        pythonpath: Import roots, relative to project_root. Empty means the
            project root plus ``src`` when that directory exists.
        include_tags: Tags a method must carry one of (empty matches all).
        exclude_tags: Tags that exclude a method; exclusion wins.
        suites: Suite names to take classes from (suite engine only).
        meta_marks: Marks that stand for other tags and marks.
        parallel_methods: Weight a class by its matching methods (True) or as a
            single unit (False).
        max_methods_per_bucket: Capacity used when classes must be packed.
        max_parallel_runners: Number of CI jobs available.
        output_file: Manifest path, relative to project_root; ``.json`` is
            appended when missing.
    """

    project_root: Path = field(default_factory=Path.cwd)
    enabled: bool = True
    engine: TestEngine = TestEngine.PYTEST
    test_dir: str = DEFAULT_TEST_DIR
    pythonpath: tuple[str, ...] = ()
    include_tags: frozenset[str] = frozenset()
    exclude_tags: frozenset[str] = frozenset()
    suites: frozenset[str] = frozenset()
    meta_marks: dict[str, MetaMark] = field(default_factory=dict)
    parallel_methods: bool = True
    max_methods_per_bucket: int = DEFAULT_MAX_METHODS_PER_BUCKET
    max_parallel_runners: int = DEFAULT_MAX_PARALLEL_RUNNERS
    output_file: str = DEFAULT_OUTPUT_FILE

    @property
    def test_directory(self) -> Path:
        """Absolute directory scanned for test modules."""
        return self.project_root / self.test_dir

    @property
    def output_path(self) -> Path:
        """Absolute manifest path, always ending in ``.json``."""
        path = self.project_root / self.output_file
        if path.suffix != '.json':
            path = path.with_name(path.name + '.json')
        return path

    def import_roots(self) -> list[Path]:
        """Return the absolute import roots classes are loaded from."""
        if self.pythonpath:
            return [self.project_root / entry for entry in self.pythonpath]
        roots = [self.project_root]
        src_dir = self.project_root / 'src'
        if src_dir.is_dir():
            roots.append(src_dir)
        return roots


def _parse_meta_marks(raw: dict[str, Any]) -> dict[str, MetaMark]:
    meta_marks: dict[str, MetaMark] = {}
    for name, entry in raw.items():
        if not isinstance(entry, dict):
            raise ConfigurationError(f'meta-marks.{name} must be a table with "tags" and/or "marks"')
        meta_marks[name] = MetaMark(
            tags=parse_csv(entry.get('tags')),
            marks=tuple(sorted(parse_csv(entry.get('marks')))),
        )
    return meta_marks


def _parse_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f'{name} must be true or false, got {value!r}')
    return value


def _parse_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f'{name} must be an integer, got {value!r}')
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f'{name} must be an integer, got {value!r}') from exc


def validate_config(config: AllocatorConfig) -> AllocatorConfig:
    """Reject settings no allocation can honour.

    ``max_methods_per_bucket`` may be zero or negative: every class with
    methods then simply gets a bucket of its own.

    Raises:
        ConfigurationError: If ``max_parallel_runners`` is below 1.
    """
    if config.max_parallel_runners < 1:
        raise ConfigurationError(f'max-parallel-runners must be at least 1, got {config.max_parallel_runners}')
    return config


def load_config(rootdir: Path) -> AllocatorConfig:
    """Load configuration from pyproject.toml.

    Reads the [tool.pytest-allocator] section from pyproject.toml in the
    given directory. Returns default configuration if the file or section
    does not exist.

    Args:
        rootdir: Directory containing pyproject.toml.

    Returns:
        AllocatorConfig with values from pyproject.toml or defaults.

    Raises:
        ConfigurationError: If a value has the wrong type or the engine is unknown.
    """
    pyproject_path = rootdir / 'pyproject.toml'

    if not pyproject_path.exists():
        return AllocatorConfig(project_root=rootdir)

    with pyproject_path.open('rb') as f:
        data = tomllib.load(f)

    tool_config = data.get('tool', {}).get('pytest-allocator', {})

    config = AllocatorConfig(
        project_root=rootdir,
        enabled=_parse_bool('enabled', tool_config.get('enabled', True)),
        engine=parse_engine(tool_config.get('engine', TestEngine.PYTEST.value)),
        test_dir=tool_config.get('test-dir', DEFAULT_TEST_DIR),
        pythonpath=tuple(tool_config.get('pythonpath', ())),
        include_tags=parse_csv(tool_config.get('include-tags')),
        exclude_tags=parse_csv(tool_config.get('exclude-tags')),
        suites=parse_csv(tool_config.get('suites')),
        meta_marks=_parse_meta_marks(tool_config.get('meta-marks', {})),
        parallel_methods=_parse_bool('parallel-methods', tool_config.get('parallel-methods', True)),
        max_methods_per_bucket=_parse_int(
            'max-methods-per-bucket',
            tool_config.get('max-methods-per-bucket', DEFAULT_MAX_METHODS_PER_BUCKET),
        ),
        max_parallel_runners=_parse_int(
            'max-parallel-runners',
            tool_config.get('max-parallel-runners', DEFAULT_MAX_PARALLEL_RUNNERS),
        ),
        output_file=tool_config.get('output-file', DEFAULT_OUTPUT_FILE),
    )
    return validate_config(config)


def _provided(value: str | None) -> bool:
    return value is not None and bool(value.strip())


def merge_configs(  # noqa: PLR0913
    file_config: AllocatorConfig,
    cli_engine: str | None = None,
    cli_include_tags: str | None = None,
    cli_exclude_tags: str | None = None,
    cli_suites: str | None = None,
    cli_max_methods: int | None = None,
    cli_max_runners: int | None = None,
    cli_output: str | None = None,
    cli_test_dir: str | None = None,
    cli_by_class: bool = False,
) -> AllocatorConfig:
    """Merge CLI arguments with file configuration.

    CLI arguments take precedence over pyproject.toml configuration.
    Empty strings are treated as not provided.

    Args:
        file_config: Configuration loaded from pyproject.toml.
        cli_engine: Engine name from --allocate-engine.
        cli_include_tags: Comma-separated tags from --allocate-include-tags.
        cli_exclude_tags: Comma-separated tags from --allocate-exclude-tags.
        cli_suites: Comma-separated suite names from --allocate-suites.
        cli_max_methods: Value of --allocate-max-methods.
        cli_max_runners: Value of --allocate-max-runners.
        cli_output: Value of --allocate-output.
        cli_test_dir: Value of --allocate-test-dir.
        cli_by_class: --allocate-by-class; weights each class as one unit.

    Returns:
        AllocatorConfig with CLI values overriding file config where provided.
    """
    overrides: dict[str, Any] = {}
    if _provided(cli_engine):
        overrides['engine'] = parse_engine(cli_engine)
    if _provided(cli_include_tags):
        overrides['include_tags'] = parse_csv(cli_include_tags)
    if _provided(cli_exclude_tags):
        overrides['exclude_tags'] = parse_csv(cli_exclude_tags)
    if _provided(cli_suites):
        overrides['suites'] = parse_csv(cli_suites)
    if cli_max_methods is not None:
        overrides['max_methods_per_bucket'] = cli_max_methods
    if cli_max_runners is not None:
        overrides['max_parallel_runners'] = cli_max_runners
    if _provided(cli_output):
        overrides['output_file'] = cli_output.strip()  # type: ignore[union-attr]
    if _provided(cli_test_dir):
        overrides['test_dir'] = cli_test_dir.strip()  # type: ignore[union-attr]
    if cli_by_class:
        overrides['parallel_methods'] = False

    return validate_config(replace(file_config, **overrides))
