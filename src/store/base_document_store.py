# src/store/base_document_store.py - v1
"""Abstract document store (CMS) interface.

Backends implement three primitives: fetch one document, list which ids
exist, and create a document unless one with the same id exists. Status
checks and batch persistence are built on top of them here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from tabilingo.core.models import Article, BatchCreateResult, LanguageStatus

logger = logging.getLogger(__name__)


class DocumentStoreError(Exception):
    """The backing CMS could not be reached or rejected a request."""


class BaseDocumentStore(ABC):
    """Unified interface for article storage backends."""

    @abstractmethod
    async def get_document(self, document_id: str) -> Article | None:
        """Fetch one article, or None when it does not exist.

        Raises:
            DocumentStoreError: On transport or decoding failure.
        """

    @abstractmethod
    async def existing_ids(self, document_ids: Sequence[str]) -> set[str]:
        """Return the subset of `document_ids` present in the store."""

    @abstractmethod
    async def create_if_not_exists(self, document: Article) -> bool:
        """Create `document`; return False if its id was already taken."""

    async def close(self) -> None:
        """Release backend resources. No-op by default."""

    def derive_translated_id(self, source_id: str, language: str) -> str:
        return f"{source_id}-{language}"

    async def get_translation_status(
        self, source_id: str, languages: Sequence[str]
    ) -> list[LanguageStatus]:
        ids = {lang: self.derive_translated_id(source_id, lang) for lang in languages}
        existing = await self.existing_ids(list(ids.values()))
        return [
            LanguageStatus(language=lang, exists=doc_id in existing, document_id=doc_id)
            for lang, doc_id in ids.items()
        ]

    async def batch_create_or_skip(
        self,
        source: Article,
        translations: Sequence[Article],
        dry_run: bool = False,
    ) -> BatchCreateResult:
        """Persist translated articles, skipping ids that already exist.

        Each document is handled independently; one failure does not stop
        the others.
        """
        result = BatchCreateResult()
        for document in translations:
            entry = {"language": document.lang, "document_id": document.id}
            try:
                if dry_run:
                    created = document.id not in await self.existing_ids([document.id])
                    logger.info("[DRY RUN] Would create translated document %s", document.id)
                else:
                    created = await self.create_if_not_exists(document)
            except DocumentStoreError as e:
                result.failed += 1
                result.results.append({**entry, "status": "failed", "error": str(e)})
                continue
            if created:
                result.successful += 1
                result.results.append({**entry, "status": "success"})
            else:
                result.skipped += 1
                result.results.append({**entry, "status": "skipped"})
        logger.info(
            "Persisted translations of %s",
            source.id,
            extra={"data": result.model_dump(exclude={"results"})},
        )
        return result
