from typing import Optional, Protocol, runtime_checkable

from prefix_walk.models import ListLevel


@runtime_checkable
class ListingStore(Protocol):
    """Protocol for stores that list one path segment level at a time.

    Implementations must be safe to call from several threads at once, since
    the depth lister issues sibling listings concurrently.
    """

    def list_with_delimiter(self, prefix: Optional[str] = None) -> ListLevel:
        """List objects and common prefixes strictly one segment below prefix.

        A prefix of None lists the store root. No recursion is performed.
        """
        ...
