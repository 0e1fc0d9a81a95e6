"""Error taxonomy for the exam reactor.

Every infrastructure failure surfaces as an ``ExamReactorError`` subclass.
Failing assertions inside a probe are never raised; they reach the listener
as ``failed`` results.
"""


class ExamReactorError(Exception):
    """Base error for everything raised by containers and reactors."""


class ConfigurationError(ExamReactorError):
    """Raised when a required setting is missing or invalid."""


class ContainerStartError(ExamReactorError):
    """Raised when a container cannot be started."""

    def __init__(self, container: str, message: str) -> None:
        self.container = container
        super().__init__(f"Container {container} failed to start: {message}")


class ContainerTimeoutError(ContainerStartError):
    """Raised when a container does not start within its configured timeout."""

    def __init__(self, container: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(container, f"not running after {timeout} seconds")


class DeploymentError(ExamReactorError):
    """Raised when installing or uninstalling a deployment fails."""

    def __init__(self, deployment: str, message: str) -> None:
        self.deployment = deployment
        super().__init__(f"Problem deploying {deployment}: {message}")


class InvocationError(ExamReactorError):
    """Raised when a remote test call breaks down (not a failing assertion)."""

    def __init__(self, test_id: str, message: str) -> None:
        self.test_id = test_id
        super().__init__(f"Invocation of {test_id} failed: {message}")
