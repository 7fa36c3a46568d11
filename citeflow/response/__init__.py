"""Event types, stream classification and the SSE transport."""

from .classifier import ClassifierState, Mode, StreamClassifier, parse_citation
from .events import (
    CitationEvent,
    CodeBlockEvent,
    DocumentsReferenceEvent,
    DoneEvent,
    ErrorEvent,
    Event,
    TextEvent,
    encode_sse,
)
from .streaming import EventSink, EventStream, TransportWriteError

__all__ = [
    "CitationEvent",
    "ClassifierState",
    "CodeBlockEvent",
    "DocumentsReferenceEvent",
    "DoneEvent",
    "ErrorEvent",
    "Event",
    "EventSink",
    "EventStream",
    "Mode",
    "StreamClassifier",
    "TextEvent",
    "TransportWriteError",
    "encode_sse",
    "parse_citation",
]
