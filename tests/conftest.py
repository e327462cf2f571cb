"""Shared fixtures: a throwaway SQLite repository per test."""

import pytest

from repository import ShiftRepository


@pytest.fixture
def repo(tmp_path):
    """Repository backed by a fresh SQLite file, seeded with default settings."""
    repository = ShiftRepository(f"sqlite:///{(tmp_path / 'shifts.db').as_posix()}")
    yield repository
    repository.engine.dispose()
