"""TestBucket: a group of test classes run together by one CI job."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class TestBucket:
    """Classes assigned to one job and their combined weight.

    Attributes:
        class_names: Class names in the order they were added.
        total_methods: Sum of the weights of the classes.
    """

    __test__ = False

    class_names: list[str] = field(default_factory=list)
    total_methods: int = 0

    def add(self, class_name: str, method_count: int) -> None:
        """Add a class and its weight to the bucket."""
        self.class_names.append(class_name)
        self.total_methods += method_count

    @property
    def is_empty(self) -> bool:
        """Return True if no class has been added yet."""
        return not self.class_names

    def fits(self, method_count: int, capacity: int) -> bool:
        """Return True if adding ``method_count`` keeps the bucket within ``capacity``."""
        return self.total_methods + method_count <= capacity
