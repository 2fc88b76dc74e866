"""Depth-bounded recursive listing for hierarchical object stores.

Object stores such as S3 only list one path segment level at a time when
given a delimiter. This package builds a bounded recursive listing on top of
that primitive, fanning out concurrently across sibling prefixes.

Recommended Usage:

    >>> from prefix_walk import InMemoryStore, list_with_depth
    >>> store = InMemoryStore(["a.txt", "foo/b.txt", "foo/bar/c.txt"])
    >>> result = list_with_depth(store, None, 1)
    >>> result.locations
    ['a.txt', 'foo/b.txt']
    >>> result.common_prefixes
    ('foo/bar',)

From async code, await ``traverse`` instead.
"""

__version__ = "0.1.0"

from .core import PrefixWalkError, StoreError, ValidationError
from .listing import DepthLister, list_with_depth, merge_results, traverse
from .models import AggregateResult, ListLevel, ObjectMeta
from .store import (
    InMemoryStore,
    ListingStore,
    S3ClientConfig,
    S3ClientManager,
    S3Store,
)

__all__ = [
    # Depth listing
    "DepthLister",
    "list_with_depth",
    "merge_results",
    "traverse",
    # Results
    "AggregateResult",
    "ListLevel",
    "ObjectMeta",
    # Stores
    "InMemoryStore",
    "ListingStore",
    "S3ClientConfig",
    "S3ClientManager",
    "S3Store",
    # Errors
    "PrefixWalkError",
    "StoreError",
    "ValidationError",
]
