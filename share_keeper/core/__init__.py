"""Core controller for share-keeper."""

from .share_keeper import ShareKeeper

__all__ = ["ShareKeeper"]
