# src/store/sanity_store.py - v1
"""Sanity CMS document store over the HTTP API (httpx).

Reads use the GROQ query endpoint; writes use the mutate endpoint with
`createIfNotExists`, so a translation created concurrently by another run
is never overwritten.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from tabilingo.config.settings import Settings
from tabilingo.core.models import Article
from tabilingo.store.base_document_store import BaseDocumentStore, DocumentStoreError

logger = logging.getLogger(__name__)

_GET_DOCUMENT = "*[_id == $id][0]"
_EXISTING_IDS = "*[_id in $ids]._id"


class SanityDocumentStore(BaseDocumentStore):
    """Sanity HTTP API adapter."""

    def __init__(
        self,
        project_id: str,
        dataset: str,
        token: str,
        api_version: str = "2024-01-01",
        timeout_s: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = f"https://{project_id}.api.sanity.io/v{api_version.lstrip('v')}"
        self._dataset = dataset
        self._token = token
        self._timeout = timeout_s
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> SanityDocumentStore:
        return cls(
            project_id=settings.sanity_project_id,
            dataset=settings.sanity_dataset,
            token=settings.sanity_api_token,
            api_version=settings.sanity_api_version,
            timeout_s=settings.sanity_timeout_s,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                headers=headers,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _query(self, groq: str, **params: Any) -> Any:
        query_params = {"query": groq}
        query_params.update({f"${k}": json.dumps(v) for k, v in params.items()})
        client = await self._get_client()
        try:
            response = await client.get(f"/data/query/{self._dataset}", params=query_params)
            response.raise_for_status()
            return response.json().get("result")
        except httpx.HTTPError as e:
            raise DocumentStoreError(f"Sanity query failed: {e}") from e
        except ValueError as e:
            raise DocumentStoreError(f"Sanity returned invalid JSON: {e}") from e

    async def get_document(self, document_id: str) -> Article | None:
        raw = await self._query(_GET_DOCUMENT, id=document_id)
        if raw is None:
            return None
        try:
            return Article.model_validate(raw)
        except ValidationError as e:
            raise DocumentStoreError(f"Invalid document structure: {e}") from e

    async def existing_ids(self, document_ids: Sequence[str]) -> set[str]:
        if not document_ids:
            return set()
        result = await self._query(_EXISTING_IDS, ids=list(document_ids))
        return set(result or [])

    async def create_if_not_exists(self, document: Article) -> bool:
        if await self.existing_ids([document.id]):
            return False
        client = await self._get_client()
        body = {"mutations": [{"createIfNotExists": document.to_document()}]}
        try:
            response = await client.post(
                f"/data/mutate/{self._dataset}",
                params={"returnIds": "true"},
                json=body,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DocumentStoreError(f"Failed to create translation: {e}") from e
        logger.debug("Created document %s", document.id)
        return True
