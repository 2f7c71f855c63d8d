from __future__ import annotations

import pytest

from content_orchestrator.config.settings import Settings
from content_orchestrator.storage.memory import InMemoryStateStore
from content_orchestrator.storage.runs import RunStore


@pytest.fixture
def state_store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def run_store(state_store: InMemoryStateStore) -> RunStore:
    return RunStore(state_store)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        anthropic_api_key="test-key",
        llm_model="test-model",
        state_backend="memory",
        critic_concurrency=2,
    )
