"""Loading of containers from entry points."""

import json
from importlib.metadata import entry_points
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from exam_reactor.containers.manifest import ContainerManifest
from exam_reactor.errors import ConfigurationError

ENTRY_POINT_GROUP = "exam_reactor.containers"


class ContainerNotFoundError(ConfigurationError):
    """Raised when a container plugin is not found."""


def load_container_manifest(key: str) -> ContainerManifest[Any]:
    """Load a container manifest by key.

    Args:
        key: The container key as registered in pyproject.toml
             (e.g., "local", "remote")

    Returns:
        The container manifest instance

    Raises:
        ContainerNotFoundError: If no container with the given key is found

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            manifest: ContainerManifest[Any] = entry.load()
            return manifest

    available = sorted(e.name for e in entries)
    raise ContainerNotFoundError(
        f"Container '{key}' not found. Available containers: {available}"
    )


ConfigT = TypeVar("ConfigT", bound=BaseModel)


def parse_container_config(
    manifest: ContainerManifest[ConfigT], config_json: str
) -> ConfigT:
    """Build the manifest's configuration from a JSON document.

    Raises:
        ConfigurationError: If the JSON is malformed or fails validation

    """
    try:
        data = json.loads(config_json)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"Invalid container configuration JSON: {exc}"
        ) from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Container configuration must be a JSON object")

    try:
        return manifest.config_cls.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid container configuration: {exc}") from exc
