"""Shared fixtures for CLI tests.

Every test runs in an empty working directory with a throwaway HOME and
no ``SQL_ANALYZER_*`` or ``LLM_API_KEY`` variables, so configuration
discovery never picks up the developer's own files or credentials.  The
root logger is restored afterwards because the CLI callback reconfigures
it against the runner's streams.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for name in list(os.environ):
        if name.startswith("SQL_ANALYZER_"):
            monkeypatch.delenv(name)
    monkeypatch.delenv("LLM_API_KEY", raising=False)

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))

    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield work
    root.handlers[:] = handlers
    root.setLevel(level)
