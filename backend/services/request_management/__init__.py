"""
Request management service - Core request lifecycle operations.

This module handles:
    - Creating service requests
    - Accepting/rejecting offers
    - Querying requests for clients and admins
"""

from .request_intake import IntakeResult, create_service_request
from .offer_response import (
    ACCEPT,
    ALREADY_FINALIZED,
    DECISIONS,
    EXPIRED,
    MATCHED,
    NOT_FOUND,
    REJECT,
    REJECTED,
    RespondResult,
    respond_to_match,
)
from .request_queries import (
    get_client_request,
    list_all_requests,
    list_client_requests,
    normalize_email,
)

from .exceptions import (
    RequestNotFoundError,
    RequestAccessDeniedError,
)

__all__ = [
    # Lifecycle operations
    "create_service_request",
    "IntakeResult",
    "respond_to_match",
    "RespondResult",
    "ACCEPT",
    "REJECT",
    "DECISIONS",
    "MATCHED",
    "REJECTED",
    "NOT_FOUND",
    "ALREADY_FINALIZED",
    "EXPIRED",
    # Queries
    "list_client_requests",
    "get_client_request",
    "list_all_requests",
    "normalize_email",
    # Exceptions
    "RequestNotFoundError",
    "RequestAccessDeniedError",
]
