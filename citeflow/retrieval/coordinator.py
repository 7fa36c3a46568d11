from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Sequence

from opentelemetry import trace

from citeflow.documents import Document

from .base import RetrievalError, RetrieverConfig
from .combination import CombinationPolicy, ConcatenationPolicy, ResultsBySource

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class RetrievalCoordinator:
    """Query several retrievers concurrently and merge their documents.

    Retrieval is fail-fast: the first retriever error cancels the queries
    still in flight and the whole retrieval raises :class:`RetrievalError`.
    Empty results are fine and contribute nothing.
    """

    def __init__(
        self,
        *,
        policy: CombinationPolicy | None = None,
        per_retriever_limit: int = 5,
    ) -> None:
        if per_retriever_limit <= 0:
            raise ValueError("per_retriever_limit must be greater than zero")

        self.policy = policy or ConcatenationPolicy()
        self.per_retriever_limit = per_retriever_limit

    async def retrieve(self, query: str, retrievers: Sequence[RetrieverConfig]) -> list[Document]:
        if not retrievers:
            raise ValueError("At least one retriever must be provided")

        with tracer.start_as_current_span("retrieval") as span:
            span.set_attribute("retrieval.sources", [config.name for config in retrievers])
            results = await self._gather(query, retrievers)
            order = list(dict.fromkeys(config.name for config in retrievers))
            _log_shared_links(results)
            documents = self.policy.combine(results, order)
            span.set_attribute("retrieval.documents", len(documents))

        logger.info("Retrieved %d documents from %s", len(documents), ", ".join(order))
        return documents

    async def _gather(self, query: str, retrievers: Sequence[RetrieverConfig]) -> ResultsBySource:
        results: dict[str, list[Document]] = defaultdict(list)

        async def run(config: RetrieverConfig) -> None:
            try:
                documents = await config.retriever.retrieve(query, top_k=self.per_retriever_limit)
            except asyncio.CancelledError:
                logger.debug("Retriever %s cancelled", config.name)
                raise
            except Exception as exc:
                raise RetrievalError(config.name, exc) from exc
            logger.debug("Retriever %s returned %d documents", config.name, len(documents))
            # Tasks share one event loop thread, so extending the map needs no lock.
            results[config.name].extend(documents)

        try:
            async with asyncio.TaskGroup() as group:
                for config in retrievers:
                    group.create_task(run(config), name=f"retrieve:{config.name}")
        except ExceptionGroup as errors:
            first = errors.exceptions[0]
            logger.error("Retrieval failed: %s", first)
            raise first

        return dict(results)


def _log_shared_links(results: ResultsBySource) -> None:
    sources_by_link: dict[str, list[str]] = defaultdict(list)
    for source, documents in results.items():
        for document in documents:
            if document.link is not None:
                sources_by_link[document.link].append(source)
    for link, sources in sources_by_link.items():
        if len(sources) > 1:
            logger.debug("Multiple sources for %s: %s", link, ", ".join(sources))
