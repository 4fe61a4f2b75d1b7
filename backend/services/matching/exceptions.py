"""Custom exceptions for matching."""


class MatchingConflictError(Exception):
    """Raised when concurrent advances keep claiming the same candidates."""
    pass
