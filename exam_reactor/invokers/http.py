"""Invocation of probe tests inside a remote runtime over HTTP."""

import logging
from dataclasses import dataclass, field
from typing import Literal

import aiohttp
from pydantic import Field, ValidationError

from exam_reactor.errors import InvocationError
from exam_reactor.invokers.base import ProbeInvoker
from exam_reactor.models.base import Model
from exam_reactor.models.description import TestAddress
from exam_reactor.models.result import TestResult

log = logging.getLogger(__name__)

INVOCATIONS_PATH = "invocations"


class InvocationResponse(Model):
    """Body returned by the runtime for one invocation."""

    status: Literal["passed", "failed", "error"]
    duration: float = Field(default=0.0, ge=0.0)
    message: str | None = None


@dataclass(frozen=True, kw_only=True)
class HttpProbeInvoker(ProbeInvoker):
    """Posts invocation requests to the runtime management API."""

    session: aiohttp.ClientSession = field(repr=False)
    probe_name: str

    async def invoke(self, address: TestAddress) -> TestResult:
        """Ask the runtime to run the test and map its answer to a result."""
        description = address.description
        payload = {
            "identifier": address.identifier,
            "probe": self.probe_name,
            "class_name": description.class_name,
            "method_name": description.method_name,
            "arguments": list(address.arguments),
        }

        log.debug("Invoking %s in probe %s", description, self.probe_name)
        try:
            async with self.session.post(INVOCATIONS_PATH, json=payload) as response:
                if response.status != 200:
                    text = await response.text()
                    raise InvocationError(
                        description.test_id, f"{response.status} {text}"
                    )
                data = await response.json()
        except aiohttp.ClientError as exc:
            raise InvocationError(description.test_id, str(exc)) from exc

        try:
            body = InvocationResponse.model_validate(data)
        except ValidationError as exc:
            raise InvocationError(
                description.test_id, f"invalid invocation response: {exc}"
            ) from exc

        return TestResult(
            description=description,
            status=body.status,
            duration=body.duration,
            message=body.message,
        )
