"""Configuration for the remote container."""

from pydantic import SecretStr

from exam_reactor.containers.config import ContainerConfig


class RemoteContainerConfig(ContainerConfig):
    """Configuration for a runtime reached through its management API.

    ``modules`` are URLs of archives fetched and deployed when the
    container starts.
    """

    name: str = "remote"
    api_base_url: str = "http://localhost:8181/exam/"
    token: SecretStr | None = None
