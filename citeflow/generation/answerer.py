"""Answer generation through an OpenAI-compatible chat completions API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from openai import AsyncOpenAI, OpenAIError

from citeflow.channels import Channel
from citeflow.documents import Document

from .base import GenerationError
from .prompt import PromptTemplate

logger = logging.getLogger(__name__)

PROVIDER_BASE_URLS = {
    "openai": None,
    "groq": "https://api.groq.com/openai/v1",
}


@dataclass(frozen=True, slots=True)
class CompletionSettings:
    model: str = "gpt-4o-mini"
    max_tokens: int = 600
    temperature: float = 0.0


def build_client(provider: str, api_key: str | None, *, base_url: str | None = None) -> AsyncOpenAI:
    """Create a client for ``provider``; an explicit ``base_url`` wins."""

    if provider not in PROVIDER_BASE_URLS:
        raise ValueError(f"unsupported provider: {provider}")
    return AsyncOpenAI(api_key=api_key, base_url=base_url or PROVIDER_BASE_URLS[provider])


class ChatCompletionAnswerer:
    """Generation source asking a chat model for a cited answer."""

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        prompt: PromptTemplate | None = None,
        settings: CompletionSettings | None = None,
    ) -> None:
        self._client = client
        self.prompt = prompt or PromptTemplate()
        self.settings = settings or CompletionSettings()

    def _request(self, query: str, documents: Sequence[Document], *, stream: bool) -> dict[str, Any]:
        return {
            "model": self.settings.model,
            "messages": [{"role": "user", "content": self.prompt.render(query, documents)}],
            "max_tokens": self.settings.max_tokens,
            "temperature": self.settings.temperature,
            "stream": stream,
        }

    async def generate(
        self,
        query: str,
        documents: Sequence[Document],
        output: Channel[str],
        *,
        stream: bool = True,
    ) -> None:
        try:
            if stream:
                await self._stream(query, documents, output)
            else:
                await self._complete(query, documents, output)
        finally:
            await output.close()

    async def _complete(self, query: str, documents: Sequence[Document], output: Channel[str]) -> None:
        try:
            response = await self._client.chat.completions.create(**self._request(query, documents, stream=False))
        except OpenAIError as exc:
            raise GenerationError(f"error making chat completion request: {exc}") from exc

        if not response.choices:
            raise GenerationError("chat completion returned no choices")
        await output.send(response.choices[0].message.content or "")

    async def _stream(self, query: str, documents: Sequence[Document], output: Channel[str]) -> None:
        fragments = 0
        try:
            completion = await self._client.chat.completions.create(**self._request(query, documents, stream=True))
            async for chunk in completion:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    fragments += 1
                    await output.send(content)
        except OpenAIError as exc:
            raise GenerationError(f"error while streaming response: {exc}") from exc
        logger.debug("Streamed %d fragments from %s", fragments, self.settings.model)
