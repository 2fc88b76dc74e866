"""Exception hierarchy for prefix-walk."""


class PrefixWalkError(Exception):
    """Base exception for all prefix-walk errors."""

    pass


class ValidationError(PrefixWalkError):
    """Raised when an argument is rejected before any listing is issued."""

    pass


class StoreError(PrefixWalkError):
    """Raised when a one-level listing call against a store fails."""

    pass
