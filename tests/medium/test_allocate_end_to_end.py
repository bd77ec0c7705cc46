"""End-to-end tests for allocate_tests against projects on disk.

Each test builds a small project under tmp_path with its own uniquely named
test directory, so imported modules never collide across tests.
"""

from __future__ import annotations

import json
import textwrap

import pytest

from pytest_allocator.config import AllocatorConfig, TestEngine, load_config
from pytest_allocator.filtering import MetaMark
from pytest_allocator.service import allocate_tests


ORDERS_MODULE = """
import pytest


class TestOrders:
    @pytest.mark.tag('smoke')
    def test_create(self):
        pass

    @pytest.mark.tag('smoke', 'slow')
    def test_bulk_import(self):
        pass

    def test_cancel(self):
        pass

    def helper(self):
        pass

    class TestRefunds:
        @pytest.mark.tag('smoke')
        def test_refund(self):
            pass


class TestInventory:
    @pytest.mark.tag('slow')
    def test_recount(self):
        pass


class OrderFactory:
    def test_not_a_test_class(self):
        pass
"""

BILLING_MODULE = """
import pytest


class TestInvoices:
    @pytest.mark.critical_path
    def test_issue(self):
        pass

    def test_void(self):
        pass
"""


def make_project(root, test_dir):
    package = root / test_dir
    package.mkdir()
    (package / 'test_orders.py').write_text(textwrap.dedent(ORDERS_MODULE))
    (package / 'test_billing.py').write_text(textwrap.dedent(BILLING_MODULE))
    return root


def read_manifest(path):
    return json.loads(path.read_text())


@pytest.mark.medium
class TestAllocateByTags:
    """Allocation with the pytest engine."""

    def test_counts_every_test_method_without_filters(self, tmp_path):
        """Without tag filters every test method counts."""
        make_project(tmp_path, 'e2e_all')
        config = AllocatorConfig(project_root=tmp_path, test_dir='e2e_all')

        result = allocate_tests(config)

        assert result.counts == {
            'e2e_all.test_billing.TestInvoices': 2,
            'e2e_all.test_orders.TestOrders': 3,
            'e2e_all.test_orders.TestOrders.TestRefunds': 1,
            'e2e_all.test_orders.TestInventory': 1,
        }
        assert read_manifest(tmp_path / 'test-allocation.json') == [
            {'jobIndex': 0, 'classes': ['e2e_all.test_billing.TestInvoices'], 'totalMethods': 2},
            {'jobIndex': 1, 'classes': ['e2e_all.test_orders.TestOrders'], 'totalMethods': 3},
            {'jobIndex': 2, 'classes': ['e2e_all.test_orders.TestOrders.TestRefunds'], 'totalMethods': 1},
            {'jobIndex': 3, 'classes': ['e2e_all.test_orders.TestInventory'], 'totalMethods': 1},
        ]

    def test_tag_filters_drop_classes_without_matches(self, tmp_path):
        """Classes with no matching method are not allocated."""
        make_project(tmp_path, 'e2e_smoke')
        config = AllocatorConfig(
            project_root=tmp_path,
            test_dir='e2e_smoke',
            include_tags=frozenset({'smoke'}),
            exclude_tags=frozenset({'slow'}),
        )

        result = allocate_tests(config)

        assert result.counts == {
            'e2e_smoke.test_orders.TestOrders': 1,
            'e2e_smoke.test_orders.TestOrders.TestRefunds': 1,
        }

    def test_meta_marks_contribute_tags(self, tmp_path):
        """Registered meta marks contribute their tags to the marked method."""
        make_project(tmp_path, 'e2e_meta')
        config = AllocatorConfig(
            project_root=tmp_path,
            test_dir='e2e_meta',
            include_tags=frozenset({'billing'}),
            meta_marks={'critical_path': MetaMark(tags=frozenset({'billing'}))},
        )

        result = allocate_tests(config)

        assert result.counts == {'e2e_meta.test_billing.TestInvoices': 1}

    def test_packs_classes_when_runners_are_scarce(self, tmp_path):
        """More classes than runners are packed by capacity."""
        make_project(tmp_path, 'e2e_packed')
        config = AllocatorConfig(
            project_root=tmp_path,
            test_dir='e2e_packed',
            max_parallel_runners=2,
            max_methods_per_bucket=4,
            output_file='build/jobs',
        )

        result = allocate_tests(config)

        assert read_manifest(tmp_path / 'build' / 'jobs.json') == [
            {'jobIndex': 0, 'classes': ['e2e_packed.test_orders.TestOrders'], 'totalMethods': 3},
            {
                'jobIndex': 1,
                'classes': [
                    'e2e_packed.test_billing.TestInvoices',
                    'e2e_packed.test_orders.TestOrders.TestRefunds',
                    'e2e_packed.test_orders.TestInventory',
                ],
                'totalMethods': 4,
            },
        ]
        assert result.output_path == tmp_path / 'build' / 'jobs.json'

    def test_class_granularity_weighs_each_class_once(self, tmp_path):
        """With method parallelism off every class weighs 1."""
        make_project(tmp_path, 'e2e_by_class')
        config = AllocatorConfig(project_root=tmp_path, test_dir='e2e_by_class', parallel_methods=False)

        result = allocate_tests(config)

        assert set(result.counts.values()) == {1}
        assert len(result.counts) == 4


@pytest.mark.medium
class TestAllocateBySuites:
    """Allocation with the suite engine."""

    def test_suite_files_select_and_weigh_classes(self, tmp_path):
        """Only classes named by the selected suites are weighed."""
        make_project(tmp_path, 'e2e_suites')
        (tmp_path / 'suites').mkdir()
        (tmp_path / 'suites' / 'regression.xml').write_text(
            textwrap.dedent(
                """\
                <suite name="regression">
                  <test name="orders">
                    <classes>
                      <class name="e2e_suites.test_orders.TestOrders">
                        <methods>
                          <include name="test_create"/>
                          <include name="test_unknown"/>
                        </methods>
                      </class>
                      <class name="e2e_suites.test_orders.TestOrders$TestRefunds"/>
                      <class name="e2e_suites.test_missing.TestGone"/>
                    </classes>
                  </test>
                </suite>
                """
            )
        )
        (tmp_path / 'suites' / 'nightly.xml').write_text(
            '<suite name="nightly"><test name="all"><classes>'
            '<class name="e2e_suites.test_billing.TestInvoices"/>'
            '</classes></test></suite>'
        )
        config = AllocatorConfig(project_root=tmp_path, engine=TestEngine.SUITE, suites=frozenset({'regression'}))

        result = allocate_tests(config)

        assert result.counts == {
            'e2e_suites.test_orders.TestOrders': 1,
            'e2e_suites.test_orders.TestOrders$TestRefunds': 1,
        }
        manifest = read_manifest(tmp_path / 'test-allocation.json')
        assert [entry['classes'] for entry in manifest] == [
            ['e2e_suites.test_orders.TestOrders'],
            ['e2e_suites.test_orders.TestOrders$TestRefunds'],
        ]

    @pytest.mark.parametrize(
        ('max_parallel_runners', 'max_methods_per_bucket'),
        [(5, 20), (1, 0)],
        ids=['one-job-per-class', 'packed'],
    )
    def test_zero_weight_class_still_gets_a_job(self, tmp_path, max_parallel_runners, max_methods_per_bucket):
        """A class whose includes name no test method is allocated with 0 methods."""
        test_dir = f'e2e_zero_{max_parallel_runners}'
        make_project(tmp_path, test_dir)
        (tmp_path / 'suite.xml').write_text(
            '<suite name="regression"><test name="all"><classes>'
            f'<class name="{test_dir}.test_billing.TestInvoices"/>'
            f'<class name="{test_dir}.test_orders.TestOrders">'
            '<methods><include name="test_unknown"/><include name="helper"/></methods>'
            '</class>'
            '</classes></test></suite>'
        )
        config = AllocatorConfig(
            project_root=tmp_path,
            engine=TestEngine.SUITE,
            suites=frozenset({'regression'}),
            max_parallel_runners=max_parallel_runners,
            max_methods_per_bucket=max_methods_per_bucket,
        )

        allocate_tests(config)

        assert read_manifest(tmp_path / 'test-allocation.json') == [
            {'jobIndex': 0, 'classes': [f'{test_dir}.test_billing.TestInvoices'], 'totalMethods': 2},
            {'jobIndex': 1, 'classes': [f'{test_dir}.test_orders.TestOrders'], 'totalMethods': 0},
        ]


@pytest.mark.medium
class TestAllocateWithUnloadableModules:
    """Modules that fail or skip on import do not abort the run."""

    def test_failing_and_skipping_modules_are_left_out(self, tmp_path):
        """Only classes that load are allocated."""
        make_project(tmp_path, 'e2e_unloadable')
        (tmp_path / 'e2e_unloadable' / 'test_optional.py').write_text(
            "import pytest\n\npytest.importorskip('e2e_missing_optional_dependency')\n\n\n"
            'class TestOptional:\n    def test_feature(self):\n        pass\n'
        )
        (tmp_path / 'e2e_unloadable' / 'test_needs_env.py').write_text(
            "raise RuntimeError('needs DB_URL')\n\n\nclass TestNeedsEnv:\n    def test_query(self):\n        pass\n"
        )
        config = AllocatorConfig(project_root=tmp_path, test_dir='e2e_unloadable')

        result = allocate_tests(config)

        assert sorted(result.counts) == [
            'e2e_unloadable.test_billing.TestInvoices',
            'e2e_unloadable.test_orders.TestInventory',
            'e2e_unloadable.test_orders.TestOrders',
            'e2e_unloadable.test_orders.TestOrders.TestRefunds',
        ]
        assert (tmp_path / 'test-allocation.json').exists()


@pytest.mark.medium
class TestAllocateFromPyproject:
    """Allocation driven by pyproject.toml configuration."""

    def test_pyproject_settings_are_applied(self, tmp_path):
        """Settings from [tool.pytest-allocator] shape the run."""
        make_project(tmp_path, 'e2e_pyproject')
        (tmp_path / 'pyproject.toml').write_text(
            textwrap.dedent(
                """\
                [tool.pytest-allocator]
                test-dir = "e2e_pyproject"
                exclude-tags = "slow"
                output-file = "ci/allocation"
                """
            )
        )

        result = allocate_tests(load_config(tmp_path))

        assert result.output_path == tmp_path / 'ci' / 'allocation.json'
        assert result.counts == {
            'e2e_pyproject.test_billing.TestInvoices': 2,
            'e2e_pyproject.test_orders.TestOrders': 2,
            'e2e_pyproject.test_orders.TestOrders.TestRefunds': 1,
        }

    def test_disabled_in_pyproject_writes_nothing(self, tmp_path):
        """enabled = false skips the run."""
        (tmp_path / 'pyproject.toml').write_text('[tool.pytest-allocator]\nenabled = false\n')

        assert allocate_tests(load_config(tmp_path)) is None
        assert not (tmp_path / 'test-allocation.json').exists()
