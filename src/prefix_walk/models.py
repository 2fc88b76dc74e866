"""Listing result types shared by stores and the depth lister."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ObjectMeta:
    """Metadata for one object, as captured at listing time.

    Attributes:
        location: Full normalised path of the object
        size: Size in bytes
        last_modified: Last modification timestamp
        e_tag: Store-specific entity tag, if any
        version: Store-specific version identifier, if any
    """

    location: str
    size: int
    last_modified: datetime
    e_tag: Optional[str] = None
    version: Optional[str] = None


@dataclass(frozen=True)
class ListLevel:
    """Result of a single one-level listing call.

    Attributes:
        objects: Objects directly under the listed prefix
        common_prefixes: Immediate sub-prefixes of the listed prefix, in the
            order the store returned them
    """

    objects: tuple[ObjectMeta, ...] = field(default_factory=tuple)
    common_prefixes: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AggregateResult:
    """Merged result of a depth-bounded traversal.

    Attributes:
        objects: Every object found from depth 0 down to the requested depth,
            in traversal order (root first, then each sub-prefix in the order
            it was listed). Order-preserving but not necessarily sorted.
        common_prefixes: The frontier, i.e. the prefixes found one level past
            the requested depth. Free of duplicates; compare as a set.
    """

    objects: tuple[ObjectMeta, ...] = field(default_factory=tuple)
    common_prefixes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def locations(self) -> list[str]:
        """Paths of the collected objects, in traversal order."""
        return [obj.location for obj in self.objects]
