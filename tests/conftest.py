"""Test setup for mdtidy."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mdtidy.schemas import FormatterConfig  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for pytest.

    This allows running the slower end-to-end checks selectively:
        pytest -m cli        # run only command-line tests
        pytest -m "not cli"  # skip them
    """
    config.addinivalue_line(
        "markers",
        "cli: marks tests that drive the command-line interface end to end",
    )


@pytest.fixture
def config() -> FormatterConfig:
    """Default formatter configuration."""
    return FormatterConfig()


@pytest.fixture
def sample_markdown() -> str:
    """A document touching every supported construct."""
    return (
        "Title\n"
        "=====\n"
        "\n"
        "Some   *emphasis* and _underscored_ text that goes on for quite a while so that it "
        "needs to be wrapped at the configured width.\n"
        "\n"
        "* one\n"
        "* two\n"
        "    * nested a\n"
        "    * nested b\n"
        "* three\n"
        "\n"
        "3. first\n"
        "7. second\n"
        "\n"
        "~~~python\n"
        "def f():\n"
        "    return 1\n"
        "~~~\n"
        "\n"
        "> quoted text\n"
        "\n"
        "\n"
        "\n"
        "    indented code\n"
    )
