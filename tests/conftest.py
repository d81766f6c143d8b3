"""Shared fixtures: a talk directory and a converter that needs no Node."""

from __future__ import annotations

import shutil
import sys
from pathlib import Path

import pytest

from slide_build.core.config import BuildConfig

FIXTURES = Path(__file__).resolve().parent / "fixtures"
FAKE_CONVERTER = FIXTURES / "fake_markdown_to_slides.py"


@pytest.fixture
def fake_converter() -> tuple[str, ...]:
    return (sys.executable, str(FAKE_CONVERTER))


@pytest.fixture
def talk_dir(tmp_path: Path) -> Path:
    """A scratch copy of the sample talk."""
    shutil.copy(FIXTURES / "talk" / "talk.md", tmp_path / "talk.md")
    return tmp_path


@pytest.fixture
def build_config(talk_dir: Path, fake_converter: tuple[str, ...]) -> BuildConfig:
    return BuildConfig(
        source=talk_dir / "talk.md",
        output=talk_dir / "talk.html",
        intermediate=talk_dir / "talk-tmp.html",
        converter=fake_converter,
    )
