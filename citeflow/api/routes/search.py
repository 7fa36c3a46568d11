from __future__ import annotations

from typing import Annotated, Any, Sequence

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from citeflow.dependencies import PipelineDep, RegistryDep
from citeflow.generation import GenerationError
from citeflow.response import EventStream
from citeflow.retrieval import RetrievalError, UnknownCorpusError

router = APIRouter(tags=["search"])

SSE_HEADERS = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}


class InvalidSearchRequest(ValueError):
    """Raised when the query or corpus selection is missing."""


class SearchAnswerResponse(BaseModel):
    answer: str
    documents: list[dict[str, Any]] = Field(default_factory=list)


class CorporaResponse(BaseModel):
    corpora: list[str]


def validate_search_params(query: str, corpora: Sequence[str]) -> tuple[str, list[str]]:
    selected = [corpus.strip() for corpus in corpora if corpus.strip()]
    if not selected:
        raise InvalidSearchRequest("at least one 'corpus' parameter is required")
    query = query.strip()
    if not query:
        raise InvalidSearchRequest("query parameter, 'q', is required")
    return query, selected


@router.get(
    "/search",
    response_model=None,
    summary="Answer a query with cited documents, streamed as Server-Sent Events",
)
async def search(
    pipeline: PipelineDep,
    registry: RegistryDep,
    q: Annotated[str, Query(description="Free-text query")] = "",
    corpus: Annotated[list[str] | None, Query(description="Corpus to search; repeatable")] = None,
    stream: Annotated[bool, Query(description="Stream events instead of returning one answer")] = True,
) -> StreamingResponse | SearchAnswerResponse:
    try:
        query, corpora = validate_search_params(q, corpus or [])
        retrievers = registry.resolve(corpora)
    except (InvalidSearchRequest, UnknownCorpusError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if not stream:
        try:
            answer = await pipeline.answer(query, retrievers)
        except RetrievalError as exc:
            raise HTTPException(status_code=502, detail=f"error retrieving documents: {exc}") from exc
        except GenerationError as exc:
            raise HTTPException(status_code=502, detail=f"error generating answer: {exc}") from exc
        return SearchAnswerResponse(
            answer=answer.text,
            documents=[document.to_payload() for document in answer.documents],
        )

    event_stream = EventStream(max_pending=pipeline.channel_capacity)
    return StreamingResponse(
        event_stream.iter_frames(pipeline.run(query, retrievers, event_stream)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/corpora", response_model=CorporaResponse, summary="List searchable corpora")
async def list_corpora(registry: RegistryDep) -> CorporaResponse:
    return CorporaResponse(corpora=registry.corpora)
