"""Incremental classification of generated text into typed events.

Generated answers arrive as arbitrary fragments. Two inline markers are
recognised regardless of where fragment boundaries fall:

* citations, ``<cited>3</cited>``, emitted as :class:`CitationEvent`;
* fenced code blocks, three backticks to three backticks, emitted verbatim as
  :class:`CodeBlockEvent`.

Everything else is plain text. Text is flushed at the end of every fragment so
clients see it promptly, while a partially seen marker is held back until it
either completes or can no longer match.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List

from citeflow.channels import Channel

from .events import CitationEvent, CodeBlockEvent, Event, TextEvent

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    TEXT = "text"
    CITATION = "citation"
    CODE = "code"


@dataclass(frozen=True, slots=True)
class Marker:
    """Opening and closing delimiters of one inline marker."""

    opening: str
    closing: str
    keep_delimiters: bool

    @property
    def trigger(self) -> str:
        return self.opening[0]

    def completed_by(self, buffer: List[str]) -> bool:
        if len(buffer) < len(self.opening) + len(self.closing):
            return False
        return "".join(buffer[-len(self.closing) :]) == self.closing

    def may_complete(self, buffer: List[str]) -> bool:
        # Past the opening delimiter the prefix was already checked on the way in.
        if len(buffer) > len(self.opening):
            return True
        return self.opening.startswith("".join(buffer))

    def payload(self, content: str) -> str:
        return content[len(self.opening) : -len(self.closing)]


CITATION_MARKER = Marker(opening="<cited>", closing="</cited>", keep_delimiters=False)
CODE_MARKER = Marker(opening="```", closing="```", keep_delimiters=True)

_MARKERS = {Mode.CITATION: CITATION_MARKER, Mode.CODE: CODE_MARKER}
_TRIGGERS = {marker.trigger: mode for mode, marker in _MARKERS.items()}


@dataclass(slots=True)
class ClassifierState:
    """Buffers of the classifier.

    ``candidate`` belongs to the active marker mode and is empty in TEXT mode;
    ``text`` is empty whenever a marker mode is active.
    """

    mode: Mode = Mode.TEXT
    text: List[str] = field(default_factory=list)
    candidate: List[str] = field(default_factory=list)

    @property
    def citation(self) -> str:
        return "".join(self.candidate) if self.mode is Mode.CITATION else ""

    @property
    def code(self) -> str:
        return "".join(self.candidate) if self.mode is Mode.CODE else ""


def parse_citation(payload: str) -> Event:
    """Turn the inside of a citation marker into an event.

    Anything but a non-negative integer degrades to a text event carrying the
    trimmed payload.
    """

    number = payload.strip()
    if number.isascii() and number.isdigit():
        return CitationEvent(int(number))
    logger.warning("Invalid citation number between citation markers: %r", number)
    return TextEvent(number)


class StreamClassifier:
    """Character-level state machine re-segmenting fragments into events.

    ``feed`` and ``finish`` are synchronous and touch nothing but the internal
    state, which keeps the machine testable without channels; :meth:`run`
    drives it between two pipeline channels.
    """

    def __init__(self) -> None:
        self.state = ClassifierState()
        self.degraded_citations = 0

    def feed(self, fragment: str) -> List[Event]:
        """Consume one fragment and return the events it completes."""

        events: List[Event] = []
        for char in fragment:
            if self.state.mode is Mode.TEXT:
                self._text_char(char, events)
            else:
                self._candidate_char(char, events)
        if self.state.mode is Mode.TEXT:
            self._flush_text(events)
        return events

    def finish(self) -> List[Event]:
        """Flush whatever is pending once the input is exhausted."""

        events: List[Event] = []
        self._flush_text(events)
        state = self.state
        if state.code:
            events.append(CodeBlockEvent(state.code))
        elif state.citation:
            events.append(TextEvent(state.citation))
        self.state = ClassifierState()
        return events

    def classify(self, fragments: Iterable[str]) -> List[Event]:
        """Classify a complete sequence of fragments in one go."""

        events: List[Event] = []
        for fragment in fragments:
            events.extend(self.feed(fragment))
        events.extend(self.finish())
        return events

    async def run(self, fragments: Channel[str], events: Channel[Event]) -> None:
        """Classify every fragment received until ``fragments`` is closed.

        Pending buffers are flushed when ``fragments`` closes. On cancellation
        they are offered to ``events`` only as far as it has room, since the
        consumer may be gone already.
        """

        try:
            async for fragment in fragments:
                for event in self.feed(fragment):
                    await events.send(event)
            for event in self.finish():
                await events.send(event)
        except asyncio.CancelledError:
            for event in self.finish():
                if not events.offer(event):
                    logger.debug("Dropped pending %s event on cancellation", event.event_type)
            raise
        finally:
            await events.close()

    def _text_char(self, char: str, events: List[Event]) -> None:
        mode = _TRIGGERS.get(char)
        if mode is None:
            self.state.text.append(char)
            return
        self._flush_text(events)
        self.state.mode = mode
        self.state.candidate.append(char)

    def _candidate_char(self, char: str, events: List[Event]) -> None:
        state = self.state
        marker = _MARKERS[state.mode]
        state.candidate.append(char)

        if marker.completed_by(state.candidate):
            event = self._complete(marker, "".join(state.candidate))
            if event is not None:
                events.append(event)
        elif marker.may_complete(state.candidate):
            return
        else:
            # False alarm: the drained characters are not scanned again.
            state.text.extend(state.candidate)

        state.mode = Mode.TEXT
        state.candidate = []

    def _complete(self, marker: Marker, content: str) -> Event | None:
        if marker.keep_delimiters:
            return CodeBlockEvent(content)
        event = parse_citation(marker.payload(content))
        if isinstance(event, TextEvent):
            self.degraded_citations += 1
            if not event.text:
                return None
        return event

    def _flush_text(self, events: List[Event]) -> None:
        if self.state.text:
            events.append(TextEvent("".join(self.state.text)))
            self.state.text = []
