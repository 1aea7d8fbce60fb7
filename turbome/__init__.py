"""TurboMe backend: git-backed markdown storage over a REST API."""

__version__ = "0.1.0"
