"""Concurrent orchestration of retrieval, generation and streaming."""

from .orchestrator import Answer, AnswerPipeline, PipelineRun, PipelineState

__all__ = ["Answer", "AnswerPipeline", "PipelineRun", "PipelineState"]
