"""Test doubles for retrievers, generation sources and event sinks."""

from __future__ import annotations

import asyncio
from typing import Sequence

from citeflow.channels import Channel
from citeflow.documents import Corpus, Document, Passage, WebReference
from citeflow.response import Event, TransportWriteError


def make_web_document(link: str, *, source: str, title: str | None = None, text: str = "") -> Document:
    title = title or f"Title for {link}"
    return Document(
        passages=[Passage(text=text or f"{source} text for {link}")],
        title=title,
        corpus=Corpus.WEB,
        web_reference=WebReference(title=title, link=link, displayed_link=link, api_source=source),
    )


def make_personal_document(text: str) -> Document:
    return Document(passages=[Passage(text=text)], title="note", corpus=Corpus.PERSONAL)


class StaticRetriever:
    def __init__(self, documents: Sequence[Document]):
        self.documents = list(documents)
        self.calls: list[tuple[str, int]] = []

    async def retrieve(self, query: str, *, top_k: int):
        self.calls.append((query, top_k))
        return self.documents[:top_k]


class FailingRetriever:
    def __init__(self, error: Exception, *, delay: float = 0.0):
        self.error = error
        self.delay = delay

    async def retrieve(self, query: str, *, top_k: int):
        if self.delay:
            await asyncio.sleep(self.delay)
        raise self.error


class BlockingRetriever:
    """Never answers; records whether it was cancelled."""

    def __init__(self):
        self.started = asyncio.Event()
        self.cancelled = False

    async def retrieve(self, query: str, *, top_k: int):
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return []


class ScriptedGenerator:
    """Generation source replaying fixed fragments, optionally failing afterwards."""

    def __init__(self, fragments: Sequence[str], *, error: Exception | None = None):
        self.fragments = list(fragments)
        self.error = error
        self.sent = 0
        self.calls: list[tuple[str, tuple[Document, ...], bool]] = []

    async def generate(self, query, documents, output: Channel[str], *, stream: bool = True) -> None:
        self.calls.append((query, tuple(documents), stream))
        try:
            fragments = self.fragments if stream else ["".join(self.fragments)]
            for fragment in fragments:
                await output.send(fragment)
                self.sent += 1
            if self.error is not None:
                raise self.error
        finally:
            await output.close()


class RecordingSink:
    """Event sink keeping everything it receives; can fail on a given write."""

    def __init__(self, *, fail_on: int | None = None, fail_types: Sequence[str] = ()):
        self.events: list[Event] = []
        self.attempts = 0
        self.fail_on = fail_on
        self.fail_types = set(fail_types)

    async def write(self, event: Event) -> None:
        self.attempts += 1
        if self.fail_on is not None and self.attempts == self.fail_on:
            raise TransportWriteError("client went away")
        if event.event_type in self.fail_types:
            raise TransportWriteError(f"cannot write {event.event_type}")
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [event.event_type for event in self.events]


