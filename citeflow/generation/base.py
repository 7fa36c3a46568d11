from __future__ import annotations

from typing import Protocol, Sequence

from citeflow.channels import Channel
from citeflow.documents import Document


class GenerationError(RuntimeError):
    """Raised when the language model cannot produce (or finish) an answer."""


class GenerationSource(Protocol):
    """Produces answer fragments for a query grounded in ``documents``.

    Implementations send fragments on ``output`` in generation order, either
    as a single fragment (``stream=False``) or incrementally, and must close
    ``output`` once no more fragments will follow, whether they succeeded or
    failed.
    """

    async def generate(
        self,
        query: str,
        documents: Sequence[Document],
        output: Channel[str],
        *,
        stream: bool = True,
    ) -> None:
        ...
