from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from citeflow.documents import Document


class Retriever(Protocol):
    async def retrieve(self, query: str, *, top_k: int) -> Sequence[Document]:
        ...


@dataclass(frozen=True, slots=True)
class RetrieverConfig:
    """A retriever registered under the source name its results are keyed by."""

    name: str
    retriever: Retriever


class RetrieverError(RuntimeError):
    """Raised by a retriever when its backend cannot answer a query."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class RetrievalError(RuntimeError):
    """Raised when document retrieval for a request fails as a whole."""

    def __init__(self, source: str, cause: BaseException) -> None:
        super().__init__(f"error while retrieving documents from {source}: {cause}")
        self.source = source
        self.cause = cause
