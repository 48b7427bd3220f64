"""Shared pytest fixtures for prstack tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def load_fixture() -> Callable[[str], str]:
    """Read a file under tests/fixtures, e.g. load_fixture("github/pr_list.json")."""

    def _load(relative_path: str) -> str:
        return (FIXTURES_DIR / relative_path).read_text(encoding="utf-8")

    return _load
