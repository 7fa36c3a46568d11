"""Language-model generation of cited answers."""

from .answerer import ChatCompletionAnswerer, CompletionSettings, build_client
from .base import GenerationError, GenerationSource
from .prompt import DEFAULT_TEMPLATE, PromptTemplate

__all__ = [
    "ChatCompletionAnswerer",
    "CompletionSettings",
    "DEFAULT_TEMPLATE",
    "GenerationError",
    "GenerationSource",
    "PromptTemplate",
    "build_client",
]
