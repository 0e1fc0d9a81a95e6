"""In-process invocation of probe tests."""

import inspect
import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from exam_reactor.errors import InvocationError
from exam_reactor.introspection import is_test_method_name, resolve_test_class
from exam_reactor.invokers.base import ProbeInvoker
from exam_reactor.models.description import TestAddress
from exam_reactor.models.probe import ProbeManifest
from exam_reactor.models.result import TestResult, TestStatus

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class RuntimeContext:
    """View of a local runtime handed to tests that ask for it.

    A test method declaring one positional parameter receives this context,
    the way probe methods elsewhere receive their framework context.
    """

    container: str
    properties: Mapping[str, str]
    deployments: Mapping[str, ProbeManifest]

    def deployed_classes(self) -> frozenset[str]:
        """Return the class names of every deployed probe."""
        return frozenset(
            probe_class.class_name
            for manifest in self.deployments.values()
            for probe_class in manifest.classes
        )


@dataclass(frozen=True, kw_only=True)
class LocalProbeInvoker(ProbeInvoker):
    """Imports the test class and calls the method in this interpreter."""

    context: RuntimeContext

    async def invoke(self, address: TestAddress) -> TestResult:
        """Call the addressed test method, translating raised errors to results."""
        description = address.description
        test_id = description.test_id

        if description.method_name is None:
            raise InvocationError(test_id, "no test method given")
        if description.class_name not in self.context.deployed_classes():
            raise InvocationError(test_id, "test class is not deployed")
        if not is_test_method_name(description.method_name):
            raise InvocationError(test_id, "not a test method")

        try:
            cls = resolve_test_class(description.class_name)
        except LookupError as exc:
            raise InvocationError(test_id, str(exc)) from exc

        function = getattr(cls, description.method_name, None)
        if not callable(function):
            raise InvocationError(test_id, "test method not found")

        started = time.monotonic()
        status: TestStatus = "passed"
        message: str | None = None
        try:
            method = getattr(cls(), description.method_name)
            outcome = method(*self._arguments(test_id, method, address.arguments))
            if inspect.isawaitable(outcome):
                await outcome
        except InvocationError:
            raise
        except AssertionError as exc:
            status, message = "failed", str(exc) or "assertion failed"
        except Exception as exc:
            log.debug("Test %s raised", test_id, exc_info=exc)
            status, message = "error", f"{type(exc).__name__}: {exc}"

        return TestResult(
            description=description,
            status=status,
            duration=time.monotonic() - started,
            message=message,
        )

    def _arguments(
        self, test_id: str, method: Callable[..., Any], arguments: Sequence[Any]
    ) -> Sequence[Any]:
        """Explicit call arguments win; otherwise inject the runtime context."""
        if arguments:
            return arguments

        required = [
            parameter
            for parameter in inspect.signature(method).parameters.values()
            if parameter.default is inspect.Parameter.empty
            and parameter.kind
            in (
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            )
        ]
        if not required:
            return ()
        if len(required) == 1:
            return (self.context,)
        raise InvocationError(
            test_id, f"cannot supply {len(required)} required parameters"
        )
