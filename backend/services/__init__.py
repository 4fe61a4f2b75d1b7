"""
Services package - Business logic layer.

This package contains all business logic services that operate on Django models
but are decoupled from the HTTP/WebSocket layer.

Modules:
    - geocoding: Address to coordinates
    - notifications: Offer delivery over email and LINE
    - matching: Candidate selection, offer dispatch and expiry
    - request_management: Request intake, offer responses and queries
"""

# Expose commonly used functions at package level
from .matching import (
    advance,
    sweep_expired,
    MatchingConflictError,
)
from .request_management import (
    create_service_request,
    respond_to_match,
    list_client_requests,
    get_client_request,
    list_all_requests,
    RequestNotFoundError,
    RequestAccessDeniedError,
)

__all__ = [
    # Matching
    "advance",
    "sweep_expired",
    "MatchingConflictError",
    # Request management
    "create_service_request",
    "respond_to_match",
    "list_client_requests",
    "get_client_request",
    "list_all_requests",
    # Exceptions
    "RequestNotFoundError",
    "RequestAccessDeniedError",
]
