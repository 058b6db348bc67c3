"""Configuration module for docker-updater."""

from .settings import Settings, find_config_file, load_settings

__all__ = ["Settings", "find_config_file", "load_settings"]
