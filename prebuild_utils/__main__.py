"""Allow running as ``python -m prebuild_utils``."""

from prebuild_utils.cli import app

if __name__ == "__main__":
    app()
