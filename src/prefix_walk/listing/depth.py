"""Depth-bounded recursive listing on top of a one-level listing primitive.

Given a store, a starting prefix and a depth, the lister calls the store's
``list_with_delimiter`` at the prefix, then recurses into every common prefix
it finds, ``depth`` levels deep. Objects are collected at every level visited;
common prefixes are only returned from the deepest level, so the result shows
what lies one level further in.

For example, with a store holding ``a.txt``, ``foo/b.txt``, ``foo/bar/c.txt``
and ``foo/bar/d.txt``:

    >>> list_with_depth(store, None, 0)  # a.txt, frontier {foo}
    >>> list_with_depth(store, None, 1)  # a.txt, foo/b.txt, frontier {foo/bar}

Sibling prefixes are listed concurrently, so wall-clock time grows with the
depth of the walk rather than with the number of prefixes visited. Output
order follows the order the store enumerated prefixes in, never the order in
which concurrent calls complete.

Each traversal runs its listing calls on its own thread pool. Fan-out is
unbounded by default: the pool starts a thread for every call that finds no
idle one, so a level with hundreds of prefixes issues hundreds of simultaneous
requests. That can exhaust connection pools in the underlying transport
(botocore defaults to 10 pooled connections per client). Pass
``max_concurrency`` to size the pool and cap in-flight listing calls.
"""

import asyncio
import contextvars
import functools
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

from prefix_walk import paths
from prefix_walk.core import get_logger, get_tracer, settings
from prefix_walk.core.exceptions import ValidationError
from prefix_walk.models import AggregateResult, ListLevel, ObjectMeta
from prefix_walk.store.base import ListingStore

logger = get_logger(__name__)
tracer = get_tracer(__name__)

# Workers are started on demand, so this only means "no cap"
UNBOUNDED_WORKERS = sys.maxsize


def merge_results(
    objects: Iterable[ObjectMeta], children: Iterable[AggregateResult]
) -> AggregateResult:
    """Fold sub-results into the objects listed at their parent.

    Objects keep their order: the parent's first, then each child's in the
    order given. Common prefixes are the union of the children's, in first
    seen order.

    Args:
        objects: Objects listed directly at the parent prefix
        children: Traversal results for each common prefix of the parent

    Returns:
        AggregateResult for the parent
    """
    merged_objects = list(objects)
    frontier: dict[str, None] = {}

    for child in children:
        merged_objects.extend(child.objects)
        frontier.update(dict.fromkeys(child.common_prefixes))

    return AggregateResult(
        objects=tuple(merged_objects), common_prefixes=tuple(frontier)
    )


def _validate(depth: int, max_concurrency: Optional[int]) -> None:
    if isinstance(depth, bool) or not isinstance(depth, int):
        raise ValidationError(f"depth must be an integer, got: {depth!r}")
    if depth < 0:
        raise ValidationError(f"depth must be non-negative, got: {depth}")
    if max_concurrency is not None and max_concurrency < 1:
        raise ValidationError(
            f"max_concurrency must be at least 1, got: {max_concurrency}"
        )


class DepthLister:
    """Lists a store recursively, a bounded number of levels deep."""

    def __init__(self, store: ListingStore, max_concurrency: Optional[int] = None):
        """Initialize depth lister.

        Args:
            store: Store providing the one-level listing primitive. It is
                shared by all concurrent calls and must be thread safe.
            max_concurrency: Maximum listing calls in flight at once.
                None leaves fan-out unbounded.
        """
        _validate(0, max_concurrency)
        self.store = store
        self.max_concurrency = max_concurrency

    async def traverse(
        self, prefix: Optional[str] = None, depth: int = 0
    ) -> AggregateResult:
        """List objects up to depth levels below prefix.

        Args:
            prefix: Starting prefix; None lists from the store root
            depth: Additional levels to recurse past the first listing

        Returns:
            AggregateResult with every object visited and the frontier of
            common prefixes one level past depth

        Raises:
            ValidationError: If depth is negative, before any listing is issued
            Exception: The first error raised by any listing call, unchanged.
                Remaining sibling calls are cancelled and nothing partial is
                returned.
        """
        _validate(depth, self.max_concurrency)
        prefix = paths.normalize(prefix)

        # Own pool per call: the loop's default executor caps fan-out at a
        # handful of threads and is joined when asyncio.run returns.
        executor = ThreadPoolExecutor(
            max_workers=self.max_concurrency or UNBOUNDED_WORKERS,
            thread_name_prefix="prefix-walk",
        )

        logger.info(
            "Starting depth listing",
            prefix=prefix,
            depth=depth,
            max_concurrency=self.max_concurrency,
        )
        try:
            result = await self._walk(prefix, depth, executor)
        finally:
            # Abandon listings still running after a failure
            executor.shutdown(wait=False, cancel_futures=True)
        logger.info(
            "Depth listing completed",
            prefix=prefix,
            depth=depth,
            object_count=len(result.objects),
            prefix_count=len(result.common_prefixes),
        )
        return result

    async def _list_level(
        self, prefix: str, executor: ThreadPoolExecutor
    ) -> ListLevel:
        with tracer.start_as_current_span(
            "list_with_delimiter", attributes={"prefix": prefix}
        ):
            loop = asyncio.get_running_loop()
            # Carry the span and log context into the worker thread
            call = functools.partial(
                contextvars.copy_context().run,
                self.store.list_with_delimiter,
                prefix or None,
            )
            return await loop.run_in_executor(executor, call)

    async def _walk(
        self, prefix: str, depth: int, executor: ThreadPoolExecutor
    ) -> AggregateResult:
        level = await self._list_level(prefix, executor)
        logger.debug(
            "Level listed",
            prefix=prefix,
            remaining_depth=depth,
            object_count=len(level.objects),
            prefix_count=len(level.common_prefixes),
        )

        if depth == 0:
            return AggregateResult(
                objects=level.objects, common_prefixes=level.common_prefixes
            )

        tasks = [
            asyncio.ensure_future(self._walk(child, depth - 1, executor))
            for child in level.common_prefixes
        ]
        try:
            children = await asyncio.gather(*tasks)
        except BaseException:
            # Fail fast: drop the siblings and reap them so their outcomes
            # are retrieved; only the first error reaches the caller.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return merge_results(level.objects, children)


async def traverse(
    store: ListingStore,
    prefix: Optional[str] = None,
    depth: int = 0,
    max_concurrency: Optional[int] = None,
) -> AggregateResult:
    """Convenience coroutine for a one-off depth listing.

    Args:
        store: Store providing the one-level listing primitive
        prefix: Starting prefix; None lists from the store root
        depth: Additional levels to recurse past the first listing
        max_concurrency: Maximum listing calls in flight at once

    Returns:
        AggregateResult of the traversal
    """
    lister = DepthLister(store, max_concurrency=max_concurrency)
    return await lister.traverse(prefix, depth)


def list_with_depth(
    store: ListingStore,
    prefix: Optional[str] = None,
    depth: int = 0,
    max_concurrency: Optional[int] = None,
) -> AggregateResult:
    """Blocking depth listing for callers without an event loop.

    Falls back to the configured max_concurrency when none is given.
    Must not be called from inside a running event loop; await traverse
    there instead.
    """
    if max_concurrency is None:
        max_concurrency = settings.max_concurrency
    # Reject before an event loop is spun up
    _validate(depth, max_concurrency)
    return asyncio.run(traverse(store, prefix, depth, max_concurrency))
