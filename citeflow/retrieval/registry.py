from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from .base import RetrieverConfig


class UnknownCorpusError(LookupError):
    def __init__(self, corpus: str, *, available: Sequence[str] = ()) -> None:
        message = f"corpus, {corpus}, is invalid"
        if available:
            message += f". Available corpora: {', '.join(available)}"
        super().__init__(message)
        self.corpus = corpus
        self.available = list(available)


class CorpusRegistry:
    """Map corpus names such as ``web`` or ``personal`` to their retrievers."""

    def __init__(self, retrievers_by_corpus: Mapping[str, Sequence[RetrieverConfig]] | None = None) -> None:
        self._corpora: dict[str, tuple[RetrieverConfig, ...]] = {}
        for corpus, retrievers in (retrievers_by_corpus or {}).items():
            self.register(corpus, retrievers)

    def register(self, corpus: str, retrievers: Iterable[RetrieverConfig]) -> None:
        configs = tuple(retrievers)
        if not configs:
            raise ValueError(f"corpus {corpus!r} needs at least one retriever")
        self._corpora[corpus] = configs

    @property
    def corpora(self) -> list[str]:
        return sorted(self._corpora)

    def resolve(self, corpora: Iterable[str]) -> list[RetrieverConfig]:
        """Return the retrievers for ``corpora`` in selection order, without repeats."""

        selected: list[RetrieverConfig] = []
        seen: set[str] = set()
        for corpus in corpora:
            configs = self._corpora.get(corpus)
            if configs is None:
                raise UnknownCorpusError(corpus, available=self.corpora)
            for config in configs:
                if config.name in seen:
                    continue
                seen.add(config.name)
                selected.append(config)
        return selected
