"""Identification of single tests and of test calls."""

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import Field

from exam_reactor.models.base import Model


class TestDescription(Model):
    """A test class, optionally narrowed down to one of its methods.

    A description without ``method_name`` is a structural node of the test
    tree (the class itself) and is never executed.
    """

    __test__ = False

    class_name: str = Field(..., description="Importable class path")
    method_name: str | None = Field(default=None, description="Test method name")

    @property
    def is_executable(self) -> bool:
        """Whether this description names a runnable test method."""
        return self.method_name is not None

    @property
    def test_id(self) -> str:
        """Human readable identifier, ``class#method``."""
        if self.method_name is None:
            return self.class_name
        return f"{self.class_name}#{self.method_name}"

    def __str__(self) -> str:
        return self.test_id


@dataclass(frozen=True, kw_only=True)
class TestAddress:
    """A single call of a test inside a container."""

    __test__ = False

    description: TestDescription
    arguments: Sequence[Any] = ()
    identifier: str = field(default_factory=lambda: str(uuid.uuid4()))
