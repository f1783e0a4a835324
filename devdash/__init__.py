"""devdash: Docker / GitHub Actions metrics backend."""

__version__ = "0.1.0"
