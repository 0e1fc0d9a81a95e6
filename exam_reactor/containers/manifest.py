"""Container manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

from exam_reactor.containers.base import TestContainer

ConfigT = TypeVar("ConfigT", bound=BaseModel)


@dataclass(frozen=True, kw_only=True)
class ContainerManifest(Generic[ConfigT]):
    """Manifest describing a container plugin.

    Holds the configuration class and a factory that turns a configuration
    into a container whose client-side resources live as long as the
    returned context.
    """

    config_cls: type[ConfigT]
    container_factory: Callable[[ConfigT], AbstractAsyncContextManager[TestContainer]]
