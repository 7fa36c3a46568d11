from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Sequence


@dataclass(slots=True)
class QueryEncoderConfig:
    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str | None = None
    normalize: bool = True


class QueryEncoder:
    """Embed query text with a lazily loaded sentence-transformers model."""

    def __init__(
        self,
        config: QueryEncoderConfig | None = None,
        *,
        model_factory: Callable[[str, str | None], object] | None = None,
    ) -> None:
        self.config = config or QueryEncoderConfig()
        self._model = None
        self._model_factory = model_factory

    def _ensure_model(self) -> object:
        if self._model is not None:
            return self._model

        if self._model_factory is not None:
            self._model = self._model_factory(self.config.model_name, self.config.device)
            return self._model

        from sentence_transformers import SentenceTransformer

        self._model = SentenceTransformer(self.config.model_name, device=self.config.device)
        return self._model

    def encode(self, text: str) -> list[float]:
        model = self._ensure_model()
        encode = getattr(model, "encode", None)
        if encode is None:
            raise RuntimeError("Model does not expose an encode method")

        vectors: Sequence[Sequence[float]] = encode([text], normalize_embeddings=self.config.normalize)
        return [float(value) for value in vectors[0]]

    async def encode_async(self, text: str) -> list[float]:
        """Run :meth:`encode` off the event loop; model inference is blocking."""

        return await asyncio.to_thread(self.encode, text)
