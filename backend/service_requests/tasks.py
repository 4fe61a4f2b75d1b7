"""Celery tasks for request matching background processing."""

from celery import shared_task
from django.db import close_old_connections
import logging

logger = logging.getLogger(__name__)


@shared_task
def sweep_expired_matches_task():
    """
    Periodic sweep (scheduled by Celery beat).

    Expires waiting offers past their deadline and advances each affected
    request that is still pending.
    """
    from services.matching import sweep_expired

    try:
        result = sweep_expired()
    finally:
        # Close stale DB connections for long-running workers
        close_old_connections()

    return {
        "expired": result.expired,
        "advanced": result.advanced,
        "exhausted": result.exhausted,
        "failed": result.failed,
    }

