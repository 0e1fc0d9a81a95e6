"""Abstract bridge between a container and the tests inside it."""

from abc import ABC, abstractmethod

from exam_reactor.models.description import TestAddress
from exam_reactor.models.result import TestResult


class ProbeInvoker(ABC):
    """Locates and executes one test method inside a runtime.

    Each container kind ships its own invoker; neither the reactor nor the
    container base class depends on how the call is carried out.
    """

    @abstractmethod
    async def invoke(self, address: TestAddress) -> TestResult:
        """Execute the addressed test and return its outcome.

        Failing assertions and errors raised by the test are returned as
        ``failed`` and ``error`` results.

        Raises:
            InvocationError: If the test cannot be reached or called at all

        """
