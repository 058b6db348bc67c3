"""docker-updater: keep running containers and compose projects on their latest images."""

__version__ = "1.0.0"
