"""Citeflow: retrieval-grounded answers streamed as typed events."""
