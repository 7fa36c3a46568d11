"""End-to-end orchestration of one answer request.

A request moves through ``RETRIEVING -> GENERATING -> DRAINING -> TERMINATED``.
Retrieval finishes before generation starts because the documents are part of
the prompt. Generation, classification and relaying then run as three tasks
joined by bounded channels, so a slow client throttles classification, which
in turn throttles generation. The three tasks share one task group: the first
failure cancels the others. Whatever happens, exactly one terminal event
(``done`` or ``error``) is offered to the sink.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Sequence

from opentelemetry import trace

from citeflow.channels import Channel
from citeflow.documents import Document
from citeflow.generation import GenerationSource
from citeflow.response import (
    DocumentsReferenceEvent,
    DoneEvent,
    ErrorEvent,
    Event,
    EventSink,
    StreamClassifier,
)
from citeflow.retrieval import RetrievalCoordinator, RetrieverConfig

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DEFAULT_ERROR_MESSAGE = "Internal server error occurred."


class PipelineState(str, Enum):
    RETRIEVING = "retrieving"
    GENERATING = "generating"
    DRAINING = "draining"
    TERMINATED = "terminated"


@dataclass(slots=True)
class PipelineRun:
    """Bookkeeping for one request, returned once the run has terminated."""

    query: str
    state: PipelineState = PipelineState.RETRIEVING
    documents: tuple[Document, ...] = ()
    events_written: int = 0
    terminal: Event | None = None
    terminal_delivered: bool = False
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return isinstance(self.terminal, DoneEvent)


@dataclass(frozen=True, slots=True)
class Answer:
    text: str
    documents: tuple[Document, ...] = field(default_factory=tuple)


def _first_error(errors: BaseExceptionGroup) -> BaseException:
    error = errors.exceptions[0]
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error


class AnswerPipeline:
    """Retrieve documents, generate a cited answer and stream it as events."""

    def __init__(
        self,
        coordinator: RetrievalCoordinator,
        generator: GenerationSource,
        *,
        channel_capacity: int = 1,
        classifier_factory: Callable[[], StreamClassifier] = StreamClassifier,
        error_message: str = DEFAULT_ERROR_MESSAGE,
    ) -> None:
        if channel_capacity <= 0:
            raise ValueError("channel_capacity must be greater than zero")

        self.coordinator = coordinator
        self.generator = generator
        self.channel_capacity = channel_capacity
        self.classifier_factory = classifier_factory
        self.error_message = error_message

    async def run(self, query: str, retrievers: Sequence[RetrieverConfig], sink: EventSink) -> PipelineRun:
        """Stream the answer for ``query`` to ``sink``.

        Stage failures end in an ``error`` event instead of raising; only
        cancellation of the caller propagates, after a best-effort ``error``
        event.
        """

        run = PipelineRun(query=query)
        with tracer.start_as_current_span("answer.stream") as span:
            try:
                documents = await self.coordinator.retrieve(query, retrievers)
                run.documents = tuple(documents)
                await sink.write(DocumentsReferenceEvent(run.documents))
                run.state = PipelineState.GENERATING
                await self._stream(run, sink)
            except asyncio.CancelledError:
                logger.info("Answer pipeline cancelled while %s", run.state.value)
                await self._terminate(run, sink, ErrorEvent("Request cancelled."))
                raise
            except Exception as exc:
                logger.error("Answer pipeline failed while %s: %s", run.state.value, exc, exc_info=exc)
                span.record_exception(exc)
                run.error = exc
                await self._terminate(run, sink, ErrorEvent(self.error_message))
            else:
                await self._terminate(run, sink, DoneEvent())
            span.set_attribute("answer.events", run.events_written)
            span.set_attribute("answer.succeeded", run.succeeded)
        return run

    async def answer(self, query: str, retrievers: Sequence[RetrieverConfig]) -> Answer:
        """Generate the whole answer in one shot, without classification."""

        with tracer.start_as_current_span("answer.complete"):
            documents = tuple(await self.coordinator.retrieve(query, retrievers))
            fragments: Channel[str] = Channel(self.channel_capacity)
            parts: list[str] = []

            async def collect() -> None:
                async for fragment in fragments:
                    parts.append(fragment)

            try:
                async with asyncio.TaskGroup() as group:
                    group.create_task(self._generate(query, documents, fragments, stream=False))
                    group.create_task(collect())
            except ExceptionGroup as errors:
                raise _first_error(errors)

        return Answer(text="".join(parts), documents=documents)

    async def _stream(self, run: PipelineRun, sink: EventSink) -> None:
        fragments: Channel[str] = Channel(self.channel_capacity)
        events: Channel[Event] = Channel(self.channel_capacity)
        classifier = self.classifier_factory()

        try:
            async with asyncio.TaskGroup() as group:
                group.create_task(self._generate(run.query, run.documents, fragments, stream=True), name="generate")
                group.create_task(classifier.run(fragments, events), name="classify")
                group.create_task(self._relay(run, events, sink), name="relay")
        except ExceptionGroup as errors:
            raise _first_error(errors)

    async def _generate(
        self,
        query: str,
        documents: Sequence[Document],
        fragments: Channel[str],
        *,
        stream: bool,
    ) -> None:
        try:
            await self.generator.generate(query, documents, fragments, stream=stream)
        finally:
            # Closing twice is harmless; a source that forgets would stall the classifier.
            await fragments.close()

    async def _relay(self, run: PipelineRun, events: Channel[Event], sink: EventSink) -> None:
        async for event in events:
            await sink.write(event)
            run.events_written += 1
        run.state = PipelineState.DRAINING

    async def _terminate(self, run: PipelineRun, sink: EventSink, event: Event) -> None:
        if run.terminal is not None:
            return
        run.terminal = event
        run.state = PipelineState.TERMINATED
        try:
            await sink.write(event)
        except Exception as exc:
            logger.error("Failed to write final %s event: %s", event.event_type, exc)
            return
        run.terminal_delivered = True
