"""Docker client utilities for docker-updater."""

import docker
from docker import DockerClient
from docker.errors import DockerException
from requests.exceptions import RequestException

from docker_updater.config import Settings
from docker_updater.utils.exceptions import DockerDaemonUnreachableError
from docker_updater.utils.logging import get_logger

logger = get_logger(__name__)

# The SDK lets transport failures from requests through unwrapped.
DOCKER_ERRORS = (DockerException, RequestException)


class DockerClientManager:
    """Owns the Docker client connection for the duration of a run."""

    def __init__(self, settings: Settings) -> None:
        """Initialize Docker client manager."""
        self._client: DockerClient | None = None
        self.settings = settings

    def get_client(self) -> DockerClient:
        """
        Get or create Docker client instance.

        Returns:
            DockerClient instance

        Raises:
            DockerDaemonUnreachableError: If unable to connect to Docker daemon
        """
        if self._client is None:
            try:
                if self.settings.docker_host:
                    client = docker.DockerClient(base_url=self.settings.docker_host)
                else:
                    client = docker.from_env()

                # Test connection
                client.ping()
            except DOCKER_ERRORS as e:
                logger.error("Failed to connect to Docker daemon", extra={"error": str(e)})
                raise DockerDaemonUnreachableError(original_error=e) from e

            self._client = client
            logger.debug(
                "Connected to Docker daemon",
                extra={"docker_version": client.version().get("Version")},
            )

        return self._client

    def close(self) -> None:
        """Close Docker client connection."""
        if self._client:
            self._client.close()
            self._client = None
            logger.debug("Docker client connection closed")
