"""Retrieval of supporting documents from web and personal corpora."""

from .base import RetrievalError, Retriever, RetrieverConfig, RetrieverError
from .combination import CombinationPolicy, ConcatenationPolicy, LinkRankingPolicy, build_policy
from .coordinator import RetrievalCoordinator
from .embedding import QueryEncoder, QueryEncoderConfig
from .personal import PersonalCollectionRetriever
from .registry import CorpusRegistry, UnknownCorpusError
from .urls import URLParseError, URLParts, displayed_link, parse_url
from .web import ExaRetriever, SerpRetriever

__all__ = [
    "CombinationPolicy",
    "ConcatenationPolicy",
    "CorpusRegistry",
    "ExaRetriever",
    "LinkRankingPolicy",
    "PersonalCollectionRetriever",
    "QueryEncoder",
    "QueryEncoderConfig",
    "RetrievalCoordinator",
    "RetrievalError",
    "Retriever",
    "RetrieverConfig",
    "RetrieverError",
    "SerpRetriever",
    "URLParseError",
    "URLParts",
    "UnknownCorpusError",
    "build_policy",
    "displayed_link",
    "parse_url",
]
