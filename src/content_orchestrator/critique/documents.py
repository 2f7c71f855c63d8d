"""Reference documents injected into author and critic prompts."""

from __future__ import annotations

from typing import Protocol


class DocumentProvider(Protocol):
    async def get_document(self, entity_id: str, doc_type: str) -> str | None: ...


class StaticDocumentProvider:
    """Documents held in memory, keyed by entity then document type."""

    def __init__(self, documents: dict[str, dict[str, str]] | None = None) -> None:
        self._documents = documents or {}

    async def get_document(self, entity_id: str, doc_type: str) -> str | None:
        return self._documents.get(entity_id, {}).get(doc_type)


async def load_reference_docs(
    provider: DocumentProvider | None, entity_id: str, doc_types: list[str]
) -> list[str]:
    if provider is None:
        return []
    sections: list[str] = []
    for doc_type in doc_types:
        content = await provider.get_document(entity_id, doc_type)
        if content:
            sections.append(f"## {doc_type.replace('-', ' ').upper()}\n{content}")
    return sections
