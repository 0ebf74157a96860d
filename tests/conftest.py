# tests/conftest.py
# Isolate TP_* configuration and give each test its own working directory.

from __future__ import annotations

import os
import tempfile

import pytest

from tinypath.config import defaults


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop TP_* overrides and pin process defaults for every test."""
    for k in list(os.environ.keys()):
        if k.startswith("TP_"):
            monkeypatch.delenv(k, raising=False)
    monkeypatch.setattr(defaults, "IO", defaults.IODefaults(binmode="default"))
    monkeypatch.setattr(defaults, "TEMP", defaults.TempDefaults(template="tinypath-XXXXXXXX"))


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test with ``tmp_path`` as the current directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def isolated_tmpdir(tmp_path, monkeypatch):
    """Point the host temp directory (TMPDIR) at a private directory."""
    target = tmp_path / "host-tmp"
    target.mkdir()
    monkeypatch.setenv("TMPDIR", str(target))
    # gettempdir() caches its first answer
    monkeypatch.setattr(tempfile, "tempdir", None)
    return target


