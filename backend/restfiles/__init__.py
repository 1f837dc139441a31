"""RestFiles — sandboxed HTTP file repository service."""

__version__ = "0.1.0"
