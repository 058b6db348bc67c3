"""Allow ``python -m docker_updater``."""

from docker_updater.cli import app

if __name__ == "__main__":
    app()
