"""Shared pytest fixtures."""

import pytest

from ordercore.infrastructure.persistence.memory import InMemoryDatabase


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase(lock_timeout=2.0)
