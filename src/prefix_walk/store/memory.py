"""Thread-safe in-process store, used for tests and local experiments."""

import threading
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from prefix_walk import paths
from prefix_walk.core import get_logger
from prefix_walk.core.exceptions import ValidationError
from prefix_walk.models import ListLevel, ObjectMeta

logger = get_logger(__name__)


class InMemoryStore:
    """Keeps objects in a map and lists them one segment level at a time.

    Listings walk keys in sorted order, so both objects and common prefixes
    come back lexicographically ordered, like most object storage services.
    """

    def __init__(self, entries: Iterable[Union[str, ObjectMeta]] = ()):
        """Initialize the store.

        Args:
            entries: Object keys (stored as empty objects) or full ObjectMeta
        """
        self._objects: dict[str, ObjectMeta] = {}
        self._lock = threading.Lock()
        self._next_e_tag = 0

        for entry in entries:
            if isinstance(entry, ObjectMeta):
                self._insert(entry)
            else:
                self.add(entry)

    def add(self, location: str, size: int = 0) -> ObjectMeta:
        """Store an object at location and return its metadata."""
        location = paths.normalize(location)
        if not location:
            raise ValidationError("Object location must not be empty")

        with self._lock:
            meta = ObjectMeta(
                location=location,
                size=size,
                last_modified=datetime.now(timezone.utc),
                e_tag=str(self._next_e_tag),
            )
            self._next_e_tag += 1
            self._objects[location] = meta
        return meta

    def _insert(self, meta: ObjectMeta) -> None:
        location = paths.normalize(meta.location)
        if not location:
            raise ValidationError("Object location must not be empty")
        with self._lock:
            self._objects[location] = meta

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)

    def list_with_delimiter(self, prefix: Optional[str] = None) -> ListLevel:
        """List objects and common prefixes directly under prefix."""
        prefix = paths.normalize(prefix)

        with self._lock:
            snapshot = sorted(self._objects.items())

        objects: list[ObjectMeta] = []
        common_prefixes: dict[str, None] = {}

        for location, meta in snapshot:
            below = paths.relative_parts(prefix, location)
            if not below:
                # Outside the prefix, or the prefix itself
                continue
            if len(below) == 1:
                objects.append(meta)
            else:
                common_prefixes[paths.join(prefix, below[0])] = None

        logger.debug(
            "In-memory level listed",
            prefix=prefix,
            object_count=len(objects),
            prefix_count=len(common_prefixes),
        )
        return ListLevel(objects=tuple(objects), common_prefixes=tuple(common_prefixes))
