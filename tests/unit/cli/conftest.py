"""Fixtures for CLI tests."""

from collections.abc import Iterator
from unittest.mock import patch

import pytest


@pytest.fixture
def cli_brew(fake_brew) -> Iterator:
    """Route every CLI command to the fake package manager."""
    with patch("brewctl.cli.types.HomebrewManager", return_value=fake_brew):
        yield fake_brew
