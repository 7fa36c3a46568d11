"""Policies merging per-source retrieval results into one ordered list."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence

from citeflow.documents import Document

logger = logging.getLogger(__name__)

ResultsBySource = Mapping[str, Sequence[Document]]


class CombinationPolicy(Protocol):
    def combine(self, results: ResultsBySource, order: Sequence[str]) -> list[Document]:
        """Merge ``results`` given the retriever registration ``order``."""


@dataclass(frozen=True, slots=True)
class ConcatenationPolicy:
    """Concatenate every source's documents in registration order."""

    def combine(self, results: ResultsBySource, order: Sequence[str]) -> list[Document]:
        combined: list[Document] = []
        for source in order:
            combined.extend(results.get(source, ()))
        return combined


@dataclass(frozen=True, slots=True)
class LinkRankingPolicy:
    """Order a content source by the link order of an authoritative ranking source.

    The content source supplies full documents while the ranking source only
    supplies the ranking. Ranked links missing from the content source are
    logged and skipped. Documents from any other source follow in
    registration order. Requests that do not query both sources are simply
    concatenated.
    """

    content_source: str = "exa"
    ranking_source: str = "serp"

    def combine(self, results: ResultsBySource, order: Sequence[str]) -> list[Document]:
        if self.ranking_source not in order or self.content_source not in order:
            return ConcatenationPolicy().combine(results, order)

        content_by_link: dict[str, Document] = {}
        for document in results.get(self.content_source, ()):
            if document.link is not None:
                content_by_link.setdefault(document.link, document)

        combined: list[Document] = []
        seen: set[str] = set()
        for ranked in results.get(self.ranking_source, ()):
            link = ranked.link
            if link is None or link in seen:
                continue
            document = content_by_link.get(link)
            if document is None:
                logger.info(
                    "No %s document for %s result %r (%s)",
                    self.content_source,
                    self.ranking_source,
                    ranked.title,
                    link,
                )
                continue
            seen.add(link)
            combined.append(document)

        for source in order:
            if source in (self.content_source, self.ranking_source):
                continue
            combined.extend(results.get(source, ()))
        return combined


def build_policy(name: str, *, content_source: str = "exa", ranking_source: str = "serp") -> CombinationPolicy:
    """Return the policy configured under ``name`` (``concatenate`` or ``ranked``)."""

    normalized = name.strip().lower()
    if normalized == "concatenate":
        return ConcatenationPolicy()
    if normalized == "ranked":
        return LinkRankingPolicy(content_source=content_source, ranking_source=ranking_source)
    raise ValueError(f"Unsupported combination policy: {name}")
