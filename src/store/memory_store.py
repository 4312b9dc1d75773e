# src/store/memory_store.py - v1
"""Dict-backed document store for tests and offline runs."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from tabilingo.core.models import Article
from tabilingo.store.base_document_store import BaseDocumentStore


class InMemoryDocumentStore(BaseDocumentStore):
    def __init__(self, documents: Iterable[Article] = ()) -> None:
        self._documents: dict[str, Article] = {doc.id: doc for doc in documents}

    async def get_document(self, document_id: str) -> Article | None:
        return self._documents.get(document_id)

    async def existing_ids(self, document_ids: Sequence[str]) -> set[str]:
        return {doc_id for doc_id in document_ids if doc_id in self._documents}

    async def create_if_not_exists(self, document: Article) -> bool:
        if document.id in self._documents:
            return False
        self._documents[document.id] = document
        return True

    def add(self, document: Article) -> None:
        self._documents[document.id] = document

    @property
    def documents(self) -> dict[str, Article]:
        return dict(self._documents)
