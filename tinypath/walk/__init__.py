"""Directory traversal."""

from .iterator import children, iterate, visit

__all__ = ["children", "iterate", "visit"]
