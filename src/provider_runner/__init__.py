"""Run external AI CLI providers with a prompt on stdin."""

__version__ = "0.1.0"
