"""Snapshot machine-learning experiments as git branches."""

__version__ = "0.1.0"

__all__ = ["__version__"]
