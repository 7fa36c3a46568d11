from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from qdrant_client import AsyncQdrantClient
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse

from citeflow.documents import Corpus, Document, Passage

from .base import RetrieverError
from .embedding import QueryEncoder

logger = logging.getLogger(__name__)


class PersonalCollectionRetriever:
    """Retrieve passages from a personal Qdrant collection by query embedding."""

    source = "personal"

    def __init__(
        self,
        client: AsyncQdrantClient,
        encoder: QueryEncoder,
        collection_name: str,
        *,
        text_key: str = "text",
        title_key: str = "title",
    ) -> None:
        self._client = client
        self._encoder = encoder
        self.collection_name = collection_name
        self.text_key = text_key
        self.title_key = title_key

    async def retrieve(self, query: str, *, top_k: int) -> Sequence[Document]:
        if top_k < 0:
            raise ValueError("top_k cannot be negative")

        try:
            vector = await self._encoder.encode_async(query)
        except Exception as exc:
            raise RetrieverError(self.source, f"error creating query embedding: {exc}") from exc

        try:
            response = await self._client.query_points(
                collection_name=self.collection_name,
                query=vector,
                limit=top_k,
                with_payload=True,
            )
        except (ResponseHandlingException, UnexpectedResponse) as exc:
            raise RetrieverError(self.source, f"error searching points: {exc}") from exc

        logger.debug("Collection %s returned %d points", self.collection_name, len(response.points))
        return [self._to_document(point.payload or {}) for point in response.points]

    def _to_document(self, payload: Mapping[str, Any]) -> Document:
        return Document(
            passages=[Passage(text=str(payload.get(self.text_key, "")))],
            title=str(payload.get(self.title_key, "")),
            corpus=Corpus.PERSONAL,
        )
