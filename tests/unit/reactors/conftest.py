"""Fixtures for reactor tests."""

import pytest

from exam_reactor.models.probe import Probe, ProbeBuilder
from exam_reactor.testing.containers import RecordingTestContainer

ALPHA = "tests.probe:Alpha"
BETA = "tests.probe:Beta"


@pytest.fixture
def probe() -> Probe:
    """Probe holding two classes with two tests each."""
    return (
        ProbeBuilder(name="probe")
        .add_test(ALPHA, ["a1", "a2"])
        .add_test(BETA, ["b1", "b2"])
        .build()
    )


@pytest.fixture
def containers() -> list[RecordingTestContainer]:
    """Two recording containers."""
    return [
        RecordingTestContainer(name="first"),
        RecordingTestContainer(name="second"),
    ]
