"""Custom exceptions for docker-updater."""


class DockerUpdaterError(Exception):
    """Base exception for docker-updater errors."""

    pass


class ConfigurationError(DockerUpdaterError):
    """Exception raised when the resolved configuration is contradictory or invalid."""

    pass


class MissingDependencyError(DockerUpdaterError):
    """Exception raised when a required executable is not installed."""

    def __init__(self, command: str) -> None:
        """
        Initialize MissingDependencyError.

        Args:
            command: Name of the missing executable
        """
        self.command = command
        super().__init__(f"Missing dependency: {command}")


class LockContendedError(DockerUpdaterError):
    """Exception raised when another run already holds the run lock."""

    def __init__(self, lock_file: str) -> None:
        """
        Initialize LockContendedError.

        Args:
            lock_file: Path of the contended lock file
        """
        self.lock_file = lock_file
        super().__init__(f"Another docker-updater is already running (lock: {lock_file})")


class LockFileError(DockerUpdaterError):
    """Exception raised when the lock file cannot be opened."""

    def __init__(self, lock_file: str, original_error: Exception) -> None:
        """
        Initialize LockFileError.

        Args:
            lock_file: Path of the lock file
            original_error: Underlying OS error
        """
        self.lock_file = lock_file
        self.original_error = original_error
        super().__init__(f"Cannot open lock file {lock_file}: {original_error}")


class DockerAPIError(DockerUpdaterError):
    """Exception raised when Docker API calls fail."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Initialize DockerAPIError.

        Args:
            message: Error message
            original_error: Original exception from Docker
        """
        self.original_error = original_error
        super().__init__(message)


class DockerDaemonUnreachableError(DockerAPIError):
    """Exception raised when Docker daemon is unreachable."""

    def __init__(
        self,
        message: str = (
            "Cannot access Docker. Ensure Docker is running and you have permission "
            "(root or in docker group)."
        ),
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)


class ContainerNotFoundError(DockerAPIError):
    """Exception raised when a container is not found."""

    def __init__(self, identifier: str, original_error: Exception | None = None) -> None:
        """
        Initialize ContainerNotFoundError.

        Args:
            identifier: Container ID or name that was not found
            original_error: Original exception from Docker
        """
        self.identifier = identifier
        super().__init__(f"Container not found: {identifier}", original_error)


class InspectParseError(DockerUpdaterError):
    """Exception raised when inspect data cannot be turned into a descriptor."""

    def __init__(self, identifier: str, reason: str) -> None:
        """
        Initialize InspectParseError.

        Args:
            identifier: Container ID whose inspect data was malformed
            reason: Why parsing failed
        """
        self.identifier = identifier
        self.reason = reason
        super().__init__(f"Failed to parse inspect data for {identifier}: {reason}")


class ImageNotFoundError(DockerAPIError):
    """Exception raised when a Docker image is not found locally."""

    def __init__(self, image: str, original_error: Exception | None = None) -> None:
        """
        Initialize ImageNotFoundError.

        Args:
            image: Image reference that was not found
            original_error: Original exception from Docker
        """
        self.image = image
        super().__init__(f"Image not found after pull: {image}", original_error)


class BackupWriteError(DockerUpdaterError):
    """Exception raised when a backup record cannot be written."""

    def __init__(self, path: str, original_error: Exception | None = None) -> None:
        self.path = path
        self.original_error = original_error
        super().__init__(f"Failed to write backup record {path}: {original_error}")


class ComposeError(DockerUpdaterError):
    """Exception raised when a docker compose invocation fails."""

    def __init__(self, project: str, message: str) -> None:
        """
        Initialize ComposeError.

        Args:
            project: Compose project name
            message: Error message
        """
        self.project = project
        super().__init__(f"Compose project '{project}': {message}")
