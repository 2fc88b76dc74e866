"""Depth-bounded listing operations."""

from .depth import DepthLister, list_with_depth, merge_results, traverse

__all__ = ["DepthLister", "list_with_depth", "merge_results", "traverse"]
