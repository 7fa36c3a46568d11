"""Route modules exposed by the API package."""

from . import ping, search

__all__ = ["ping", "search"]
