"""Segment-delimited object store paths.

Paths are plain strings whose segments are joined by ``DELIMITER``. They are
kept in normalised form, without leading or trailing delimiters and without
empty segments, so ``"foo/bar/"`` and ``"/foo//bar"`` both become
``"foo/bar"``. The empty string denotes the store root.

Prefix matching is segment-exact: ``foo/bar`` is a prefix of ``foo/bar/x``
but not of ``foo/bar_baz/x``.
"""

from typing import Optional

DELIMITER = "/"
ROOT = ""


def normalize(path: Optional[str]) -> str:
    """Return the normalised form of a path, ``ROOT`` for ``None``."""
    if not path:
        return ROOT
    return DELIMITER.join(part for part in path.split(DELIMITER) if part)


def parts(path: Optional[str]) -> list[str]:
    """Split a path into its segments."""
    normalized = normalize(path)
    if not normalized:
        return []
    return normalized.split(DELIMITER)


def join(prefix: Optional[str], *segments: str) -> str:
    """Join segments onto a prefix."""
    return normalize(DELIMITER.join([prefix or ROOT, *segments]))


def is_prefix(prefix: Optional[str], path: str) -> bool:
    """Check whether ``prefix`` is a segment-exact prefix of ``path``.

    The root is a prefix of every path, and every path is a prefix of itself.
    """
    prefix_parts = parts(prefix)
    path_parts = parts(path)
    return path_parts[: len(prefix_parts)] == prefix_parts


def relative_parts(prefix: Optional[str], path: str) -> Optional[list[str]]:
    """Return the segments of ``path`` below ``prefix``, or None if outside it."""
    if not is_prefix(prefix, path):
        return None
    return parts(path)[len(parts(prefix)) :]


def to_key_prefix(path: Optional[str]) -> str:
    """Render a path as a delimiter-terminated key prefix for listing APIs.

    The root renders as the empty string.
    """
    normalized = normalize(path)
    return f"{normalized}{DELIMITER}" if normalized else ROOT
