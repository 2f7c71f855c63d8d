"""Storage backends and run persistence."""

from content_orchestrator.config.settings import Settings
from content_orchestrator.storage.base import StateStore
from content_orchestrator.storage.memory import InMemoryStateStore
from content_orchestrator.storage.postgres import PostgresStateStore
from content_orchestrator.storage.runs import RunStore


def build_state_store(settings: Settings) -> StateStore:
    backend = settings.state_backend.lower().strip()
    if backend == "memory":
        return InMemoryStateStore()
    if backend == "postgres":
        database_url = settings.resolved_database_url()
        if not database_url:
            raise RuntimeError(
                "Missing database URL. Set CONTENT_ORCHESTRATOR_DATABASE_URL "
                "or ORCHESTRATOR_DATABASE_URL for the postgres state backend."
            )
        store = PostgresStateStore(database_url)
        store.migrate()
        return store
    raise ValueError(f"Unsupported state backend: {settings.state_backend}")


__all__ = [
    "InMemoryStateStore",
    "PostgresStateStore",
    "RunStore",
    "StateStore",
    "build_state_store",
]
