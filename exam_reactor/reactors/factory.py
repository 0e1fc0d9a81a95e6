"""Selection of the reactor strategy by configuration key."""

from collections.abc import Mapping, Sequence

from exam_reactor.containers.base import TestContainer
from exam_reactor.errors import ConfigurationError
from exam_reactor.models.probe import Probe
from exam_reactor.reactors.base import StagedReactor
from exam_reactor.reactors.confined import AllConfinedStagedReactor
from exam_reactor.reactors.shared import PerClassStagedReactor, PerSuiteStagedReactor

REACTORS: Mapping[str, type[StagedReactor]] = {
    "confined": AllConfinedStagedReactor,
    "per-class": PerClassStagedReactor,
    "per-suite": PerSuiteStagedReactor,
}


def create_reactor(
    strategy: str,
    containers: Sequence[TestContainer],
    probes: Sequence[Probe],
) -> StagedReactor:
    """Create the reactor registered for ``strategy``.

    Raises:
        ConfigurationError: For an unknown strategy or empty containers/probes

    """
    reactor_cls = REACTORS.get(strategy)
    if reactor_cls is None:
        raise ConfigurationError(
            f"Reactor strategy '{strategy}' not found. "
            f"Available strategies: {sorted(REACTORS)}"
        )
    return reactor_cls(containers=containers, probes=probes)
