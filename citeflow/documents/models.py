"""Immutable value types describing retrieved passages and their provenance."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Corpus(str, Enum):
    """Category of source a document was retrieved from."""

    WEB = "web"
    PERSONAL = "personal"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Passage(_FrozenModel):
    text: str


class WebReference(_FrozenModel):
    """Where a web document came from, kept so it can be cited and displayed."""

    title: str = ""
    link: str
    displayed_link: str = ""
    blurb: str = ""
    date: str = ""
    author: str = ""
    favicon: str = ""
    thumbnail: str = ""
    api_source: str = ""


class Document(_FrozenModel):
    """A retrieved document.

    ``passages`` are ordered by relevance to the query. ``web_reference`` is
    present exactly when the document belongs to the web corpus.
    """

    passages: tuple[Passage, ...] = Field(default_factory=tuple)
    title: str = ""
    corpus: Corpus = Corpus.WEB
    web_reference: WebReference | None = None

    @model_validator(mode="after")
    def _check_reference(self) -> "Document":
        if self.corpus is Corpus.WEB and self.web_reference is None:
            raise ValueError("web documents require a web reference")
        if self.corpus is not Corpus.WEB and self.web_reference is not None:
            raise ValueError(f"{self.corpus.value} documents cannot carry a web reference")
        return self

    @property
    def text(self) -> str:
        """Passages joined in rank order."""

        return "".join(passage.text for passage in self.passages)

    @property
    def link(self) -> str | None:
        return self.web_reference.link if self.web_reference is not None else None

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready mapping using the camelCase wire names."""

        return self.model_dump(mode="json", by_alias=True)
