"""Shared fixtures."""

import textwrap
from pathlib import Path

import pytest


@pytest.fixture
def home(tmp_path):
    """A fake home directory with an empty ~/.ssh."""
    path = tmp_path / "home"
    (path / ".ssh").mkdir(parents=True)
    return path


@pytest.fixture
def write_config():
    """Write a dedented ssh config file and return its path."""

    def write(path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip())
        return path

    return write
