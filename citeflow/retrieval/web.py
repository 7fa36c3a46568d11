"""Retrievers backed by web search APIs."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import httpx

from citeflow.documents import Corpus, Document, Passage, WebReference

from .base import RetrieverError
from .urls import displayed_link

logger = logging.getLogger(__name__)

EXA_SEARCH_URL = "https://api.exa.ai/search"
SERP_SEARCH_URL = "https://serpapi.com/search"


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class ExaRetriever:
    """Retrieve full page text for web results from the Exa search API."""

    source = "exa"

    def __init__(self, client: httpx.AsyncClient, api_key: str, *, max_characters: int = 1000) -> None:
        self._client = client
        self._api_key = api_key
        self.max_characters = max_characters

    def build_request(self, query: str, top_k: int) -> dict[str, Any]:
        return {
            "query": query,
            "numResults": top_k,
            "type": "auto",
            "useAutoprompt": True,
            "contents": {"text": {"maxCharacters": self.max_characters}},
        }

    async def retrieve(self, query: str, *, top_k: int) -> Sequence[Document]:
        try:
            response = await self._client.post(
                EXA_SEARCH_URL,
                json=self.build_request(query, top_k),
                headers={"x-api-key": self._api_key},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise RetrieverError(self.source, f"error querying Exa API: {exc}") from exc
        except ValueError as exc:
            raise RetrieverError(self.source, "error parsing Exa API response") from exc

        return [self._to_document(result) for result in payload.get("results") or []][:top_k]

    def _to_document(self, result: Mapping[str, Any]) -> Document:
        url = _text(result.get("url"))
        title = _text(result.get("title"))
        return Document(
            passages=[Passage(text=_text(result.get("text")))],
            title=title,
            corpus=Corpus.WEB,
            web_reference=WebReference(
                title=title,
                link=url,
                displayed_link=displayed_link(url),
                blurb=_text(result.get("summary")),
                date=_text(result.get("publishedDate")),
                author=_text(result.get("author")),
                favicon=_text(result.get("favicon")),
                thumbnail=_text(result.get("image")),
                api_source=self.source,
            ),
        )


class SerpRetriever:
    """Retrieve Google organic results through SerpApi.

    Only snippets are available, but the result order reflects Google's
    ranking, which makes this source suitable as a ranking authority.
    """

    source = "serp"

    def __init__(self, client: httpx.AsyncClient, api_key: str, *, engine: str = "google") -> None:
        self._client = client
        self._api_key = api_key
        self.engine = engine

    async def retrieve(self, query: str, *, top_k: int) -> Sequence[Document]:
        params = {"q": query, "engine": self.engine, "num": top_k, "api_key": self._api_key}
        try:
            response = await self._client.get(SERP_SEARCH_URL, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise RetrieverError(self.source, f"error querying SERP API: {exc}") from exc
        except ValueError as exc:
            raise RetrieverError(self.source, "error parsing SERP API response") from exc

        if payload.get("error"):
            raise RetrieverError(self.source, f"SERP API returned an error: {payload['error']}")

        return [self._to_document(result) for result in payload.get("organic_results") or []][:top_k]

    def _to_document(self, result: Mapping[str, Any]) -> Document:
        title = _text(result.get("title"))
        snippet = _text(result.get("snippet"))
        return Document(
            passages=[Passage(text=snippet)],
            title=title,
            corpus=Corpus.WEB,
            web_reference=WebReference(
                title=title,
                link=_text(result.get("link")),
                displayed_link=_text(result.get("displayed_link")),
                blurb=snippet,
                date=_text(result.get("date")),
                author=_text(result.get("author")),
                favicon=_text(result.get("favicon")),
                thumbnail=_text(result.get("thumbnail")),
                api_source=self.source,
            ),
        )
