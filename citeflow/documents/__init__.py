"""Document model shared by retrieval, generation and streaming."""

from .models import Corpus, Document, Passage, WebReference

__all__ = ["Corpus", "Document", "Passage", "WebReference"]
