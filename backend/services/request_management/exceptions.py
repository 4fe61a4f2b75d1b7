"""Custom exceptions for request management."""


class RequestNotFoundError(Exception):
    """Raised when a service request cannot be found."""
    pass


class RequestAccessDeniedError(Exception):
    """Raised when a client asks for a request that belongs to another email."""
    pass
