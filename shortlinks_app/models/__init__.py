"""
Domain models for the link store.

ShortLink is the only entity. It lives in memory inside LinkStore and is
persisted as one line per link by the storage strategies.
"""

from .link import ShortLink

__all__ = ["ShortLink"]
