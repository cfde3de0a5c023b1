"""Git Smart HTTP bridge built on FastAPI."""

__version__ = "0.1.0"
