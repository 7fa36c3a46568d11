"""Typed events streamed to clients while an answer is produced."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar, Sequence

from citeflow.documents import Document


@dataclass(frozen=True, slots=True)
class Event:
    """Base class of the event union; ``event_type`` names the wire type."""

    event_type: ClassVar[str] = ""

    @property
    def data(self) -> Any:  # pragma: no cover - overridden by every event
        raise NotImplementedError

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.event_type, "data": self.data}

    @property
    def terminal(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class TextEvent(Event):
    event_type: ClassVar[str] = "text"

    text: str

    @property
    def data(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class CitationEvent(Event):
    """Reference to the document with the given index in the documents reference."""

    event_type: ClassVar[str] = "citation"

    number: int

    @property
    def data(self) -> int:
        return self.number


@dataclass(frozen=True, slots=True)
class CodeBlockEvent(Event):
    """Fenced code block, delimiters and language tag included."""

    event_type: ClassVar[str] = "codeblock"

    code: str

    @property
    def data(self) -> str:
        return self.code


@dataclass(frozen=True, slots=True)
class DocumentsReferenceEvent(Event):
    event_type: ClassVar[str] = "documentsreference"

    documents: Sequence[Document] = field(default_factory=tuple)

    @property
    def data(self) -> list[dict[str, Any]]:
        return [document.to_payload() for document in self.documents]


@dataclass(frozen=True, slots=True)
class DoneEvent(Event):
    event_type: ClassVar[str] = "done"

    @property
    def data(self) -> str:
        return "DONE"

    @property
    def terminal(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class ErrorEvent(Event):
    event_type: ClassVar[str] = "error"

    message: str

    @property
    def data(self) -> str:
        return self.message

    @property
    def terminal(self) -> bool:
        return True


def encode_sse(event: Event) -> str:
    """Render one event as a Server-Sent Events frame."""

    payload = json.dumps(event.to_payload(), ensure_ascii=False)
    return f"event: {event.event_type}\ndata: {payload}\n\n"
