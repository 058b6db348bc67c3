"""Utility modules for docker-updater."""

from .logging import OK, get_logger, setup_logging

__all__ = ["OK", "get_logger", "setup_logging"]
