"""Scoped temporary resources."""

from .resource import TempResource, tempdir, tempfile

__all__ = ["TempResource", "tempdir", "tempfile"]
