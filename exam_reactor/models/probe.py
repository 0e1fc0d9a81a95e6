"""Probe artifacts: the test-bearing archives installed into containers."""

import io
import zipfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import BinaryIO

from pydantic import Field, ValidationError

from exam_reactor.errors import ConfigurationError, DeploymentError
from exam_reactor.introspection import (
    discover_test_methods,
    is_test_method_name,
    resolve_test_class,
)
from exam_reactor.models.base import Model
from exam_reactor.models.description import TestDescription

MANIFEST_NAME = "probe.json"

# Fixed timestamp keeps archives of identical probes byte-identical.
_ARCHIVE_DATE = (1980, 1, 1, 0, 0, 0)


class ProbeClass(Model):
    """A test class and the methods the probe exposes for it."""

    class_name: str = Field(..., description="Importable class path")
    methods: Sequence[str] = Field(default_factory=list)


class ProbeManifest(Model):
    """Manifest stored inside every probe archive."""

    name: str = Field(..., description="Probe name")
    classes: Sequence[ProbeClass] = Field(default_factory=list)

    def descriptions(self) -> Sequence[TestDescription]:
        """Return one description per exposed test method, in manifest order."""
        return [
            TestDescription(class_name=probe_class.class_name, method_name=method)
            for probe_class in self.classes
            for method in probe_class.methods
        ]


@dataclass(frozen=True, kw_only=True)
class Probe:
    """Immutable probe artifact plus the tests it serves."""

    name: str
    content: bytes = field(repr=False)
    tests: frozenset[TestDescription] = frozenset()

    def open(self) -> BinaryIO:
        """Return a fresh stream over the archive."""
        return io.BytesIO(self.content)

    def serves(self, description: TestDescription) -> bool:
        """Whether the probe carries the given test."""
        return description in self.tests


def read_probe_manifest(stream: BinaryIO) -> ProbeManifest:
    """Read the manifest from a probe archive.

    Raises:
        DeploymentError: If the stream is not a valid probe archive

    """
    try:
        with zipfile.ZipFile(stream) as archive:
            data = archive.read(MANIFEST_NAME)
    except (zipfile.BadZipFile, KeyError) as exc:
        raise DeploymentError("probe", f"not a probe archive ({exc})") from exc

    try:
        return ProbeManifest.model_validate_json(data)
    except ValidationError as exc:
        raise DeploymentError("probe", f"invalid probe manifest: {exc}") from exc


@dataclass(kw_only=True)
class ProbeBuilder:
    """Collects test classes and builds a probe from them exactly once."""

    name: str = "exam-probe"
    _classes: dict[str, list[str]] = field(
        default_factory=dict, init=False, repr=False
    )
    _probe: Probe | None = field(default=None, init=False, repr=False)

    def add_test(
        self, class_name: str, methods: Sequence[str] | None = None
    ) -> "ProbeBuilder":
        """Add a test class by path.

        Without ``methods`` the class is imported and all of its public
        methods become tests.

        Raises:
            ConfigurationError: If the class cannot be resolved, a method is
                private, or the probe was already built

        """
        if self._probe is not None:
            raise ConfigurationError(f"Probe {self.name} is already built")

        if methods is None:
            try:
                methods = discover_test_methods(resolve_test_class(class_name))
            except LookupError as exc:
                raise ConfigurationError(str(exc)) from exc

        for method in methods:
            if not is_test_method_name(method):
                raise ConfigurationError(
                    f"Method {method} of {class_name} is not a test method"
                )

        known = self._classes.setdefault(class_name, [])
        known.extend(method for method in methods if method not in known)
        return self

    def add_test_class(self, cls: type) -> "ProbeBuilder":
        """Add all public methods of a class."""
        return self.add_test(
            f"{cls.__module__}:{cls.__qualname__}", discover_test_methods(cls)
        )

    def build(self) -> Probe:
        """Build the probe; later calls return the same instance."""
        if self._probe is not None:
            return self._probe

        manifest = ProbeManifest(
            name=self.name,
            classes=[
                ProbeClass(class_name=class_name, methods=methods)
                for class_name, methods in self._classes.items()
            ],
        )

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            info = zipfile.ZipInfo(MANIFEST_NAME, date_time=_ARCHIVE_DATE)
            archive.writestr(info, manifest.model_dump_json())

        self._probe = Probe(
            name=self.name,
            content=buffer.getvalue(),
            tests=frozenset(manifest.descriptions()),
        )
        return self._probe
