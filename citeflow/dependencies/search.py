from __future__ import annotations

import logging
from typing import Annotated

import httpx
from fastapi import Depends, HTTPException, Request
from openai import AsyncOpenAI
from qdrant_client import AsyncQdrantClient

from citeflow.core.config import Settings
from citeflow.generation import ChatCompletionAnswerer, CompletionSettings
from citeflow.pipeline import AnswerPipeline
from citeflow.retrieval import (
    CorpusRegistry,
    ExaRetriever,
    PersonalCollectionRetriever,
    QueryEncoder,
    QueryEncoderConfig,
    RetrievalCoordinator,
    RetrieverConfig,
    SerpRetriever,
    build_policy,
)

logger = logging.getLogger(__name__)


def build_registry(
    settings: Settings,
    *,
    http_client: httpx.AsyncClient,
    qdrant_client: AsyncQdrantClient,
    encoder: QueryEncoder | None = None,
) -> CorpusRegistry:
    """Register the web and personal corpora that the settings allow for."""

    registry = CorpusRegistry()

    web: list[RetrieverConfig] = []
    if settings.exa_api_key:
        retriever = ExaRetriever(http_client, settings.exa_api_key, max_characters=settings.exa_max_characters)
        web.append(RetrieverConfig(name=retriever.source, retriever=retriever))
    if settings.serp_api_key:
        retriever = SerpRetriever(http_client, settings.serp_api_key)
        web.append(RetrieverConfig(name=retriever.source, retriever=retriever))
    if web:
        registry.register("web", web)
    else:
        logger.warning("No web search API keys configured; the web corpus is disabled")

    personal = PersonalCollectionRetriever(
        qdrant_client,
        encoder or QueryEncoder(QueryEncoderConfig(model_name=settings.embedding_model_name)),
        settings.qdrant_collection_name,
    )
    registry.register("personal", [RetrieverConfig(name=personal.source, retriever=personal)])
    return registry


def build_pipeline(settings: Settings, *, llm_client: AsyncOpenAI) -> AnswerPipeline:
    coordinator = RetrievalCoordinator(
        policy=build_policy(
            settings.combination_policy,
            content_source=settings.content_source,
            ranking_source=settings.ranking_source,
        ),
        per_retriever_limit=settings.per_retriever_limit,
    )
    answerer = ChatCompletionAnswerer(
        llm_client,
        settings=CompletionSettings(
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        ),
    )
    return AnswerPipeline(coordinator, answerer, channel_capacity=settings.channel_capacity)


async def get_pipeline(request: Request) -> AnswerPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Answer pipeline is not configured")
    return pipeline


async def get_registry(request: Request) -> CorpusRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(status_code=503, detail="Corpus registry is not configured")
    return registry


PipelineDep = Annotated[AnswerPipeline, Depends(get_pipeline)]
RegistryDep = Annotated[CorpusRegistry, Depends(get_registry)]
