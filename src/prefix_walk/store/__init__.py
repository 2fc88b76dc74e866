"""Stores exposing the one-level listing primitive."""

from .base import ListingStore
from .memory import InMemoryStore
from .s3 import S3ClientConfig, S3ClientManager, S3Store

__all__ = [
    "InMemoryStore",
    "ListingStore",
    "S3ClientConfig",
    "S3ClientManager",
    "S3Store",
]
