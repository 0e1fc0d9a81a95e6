"""Models for suite definitions loaded from suite.yaml files."""

from collections.abc import Sequence
from typing import Literal, TypeAlias

from pydantic import Field

from exam_reactor.models.base import Model
from exam_reactor.models.description import TestDescription
from exam_reactor.models.probe import Probe, ProbeBuilder

ReactorStrategy: TypeAlias = Literal["confined", "per-class", "per-suite"]


class TestClassDefinition(Model):
    """A test class and, optionally, the methods to run from it."""

    __test__ = False

    class_name: str = Field(..., alias="class", description="Importable class path")
    methods: Sequence[str] | None = Field(
        default=None,
        description="Methods to run (None means every public method)",
    )


class ProbeDefinition(Model):
    """A probe and the test classes it bundles."""

    name: str = Field(..., description="Probe name, also its deployment name")
    tests: Sequence[TestClassDefinition] = Field(default_factory=list)

    def to_builder(self) -> ProbeBuilder:
        """Create a builder holding every test class of this probe."""
        builder = ProbeBuilder(name=self.name)
        for test_class in self.tests:
            builder.add_test(test_class.class_name, test_class.methods)
        return builder


class SuiteDefinition(Model):
    """Complete suite definition loaded from suite.yaml."""

    version: str = Field(..., description="Suite definition schema version")
    reactor: ReactorStrategy = Field(
        default="confined", description="Strategy used to stage containers"
    )
    probes: Sequence[ProbeDefinition] = Field(default_factory=list)

    def build_probes(self) -> Sequence[Probe]:
        """Build every probe of the suite."""
        return [probe.to_builder().build() for probe in self.probes]


def plan_descriptions(probes: Sequence[Probe]) -> Sequence[TestDescription]:
    """Order the tests of the given probes into a run plan.

    Each class contributes a class-level marker followed by its methods;
    classes and methods are sorted by name.
    """
    methods_by_class: dict[str, set[str]] = {}
    for probe in probes:
        for description in probe.tests:
            if description.method_name is not None:
                methods_by_class.setdefault(description.class_name, set()).add(
                    description.method_name
                )

    plan: list[TestDescription] = []
    for class_name in sorted(methods_by_class):
        plan.append(TestDescription(class_name=class_name))
        plan.extend(
            TestDescription(class_name=class_name, method_name=method)
            for method in sorted(methods_by_class[class_name])
        )
    return plan
