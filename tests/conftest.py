"""Shared pytest fixtures for typedyaml tests."""

import logging
from pathlib import Path

import pytest

from typedyaml import YamlSettings


@pytest.fixture
def settings() -> YamlSettings:
    """Default settings with token tracing enabled."""
    return YamlSettings(trace=True)


@pytest.fixture
def debug_logging(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture typedyaml DEBUG records."""
    caplog.set_level(logging.DEBUG, logger="typedyaml")
    return caplog


@pytest.fixture
def write_text(tmp_path: Path):
    """Write text to a file under tmp_path and return its path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
