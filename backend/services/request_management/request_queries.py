"""Read-only request listings for the customer dashboard and admin."""

from django.db.models import QuerySet

from service_requests.models import ServiceRequest
from .exceptions import RequestAccessDeniedError, RequestNotFoundError


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def list_client_requests(client_email: str) -> QuerySet:
    """Requests placed with this email, newest first."""
    return ServiceRequest.objects.filter(
        client_email__iexact=normalize_email(client_email)
    ).order_by("-created_at")


def get_client_request(client_email: str, request_id) -> ServiceRequest:
    """
    Fetch one request on behalf of a client.

    Raises:
        RequestNotFoundError: no request with this id
        RequestAccessDeniedError: the request belongs to a different email
    """
    service_request = ServiceRequest.objects.filter(pk=request_id).first()
    if service_request is None:
        raise RequestNotFoundError("Request not found")

    if normalize_email(service_request.client_email) != normalize_email(client_email):
        raise RequestAccessDeniedError("This request belongs to a different client")

    return service_request


def list_all_requests() -> QuerySet:
    """Every request, newest first (paged by the caller)."""
    return ServiceRequest.objects.order_by("-created_at")
