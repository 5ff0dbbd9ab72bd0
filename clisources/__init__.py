"""Ordered value sources (environment variables, files, nested maps) for command-line flags."""

__version__ = "0.1.0"
__all__ = ["value_source"]