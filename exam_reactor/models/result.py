"""Models for test execution results."""

from dataclasses import dataclass
from typing import Literal, TypeAlias

from exam_reactor.models.description import TestDescription

TestStatus: TypeAlias = Literal["passed", "failed", "error"]


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Outcome of a single test invocation.

    ``failed`` means an assertion inside the test did not hold, ``error``
    means the test itself raised something else.
    """

    __test__ = False

    description: TestDescription
    status: TestStatus
    duration: float
    message: str | None = None

    @property
    def passed(self) -> bool:
        """Whether the test passed."""
        return self.status == "passed"
