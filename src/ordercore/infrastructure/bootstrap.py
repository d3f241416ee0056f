"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory
from ordercore.infrastructure.persistence.json_store import JsonDatabase
from ordercore.infrastructure.settings import Settings


@lru_cache(maxsize=None)
def database(settings: Settings) -> JsonDatabase:
    """One database per settings object, shared by every handler."""
    return JsonDatabase(settings.data_dir, lock_timeout=settings.lock_timeout)


def uow_factory(settings: Settings | None = None) -> UnitOfWorkFactory:
    return database(settings or Settings.from_env()).unit_of_work
