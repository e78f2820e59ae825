"""Policy persistence.

The evaluator never touches storage; callers load policies through a
PolicyStore and pass them in explicitly.
"""

from __future__ import annotations

from syncops_lifecycle.config import Settings
from syncops_lifecycle.store.base import PolicyStore
from syncops_lifecycle.store.memory import InMemoryPolicyStore
from syncops_lifecycle.store.sqlite import SqlitePolicyStore


def open_store(settings: Settings) -> PolicyStore:
    """Build the store selected by ``settings.store_backend``."""

    if settings.store_backend == "memory":
        return InMemoryPolicyStore(enforce_priority_rules=settings.enforce_priority_rules)

    store = SqlitePolicyStore(
        settings.store_db_path,
        enforce_priority_rules=settings.enforce_priority_rules,
    )
    store.initialize()
    return store


__all__ = ["InMemoryPolicyStore", "PolicyStore", "SqlitePolicyStore", "open_store"]
