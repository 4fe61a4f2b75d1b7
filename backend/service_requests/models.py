import uuid

from django.db import models
from django.db.models import Q

from professionals.models import Professional

# The order form writes the chosen plan into the note as "[サービス] <title>"
PLAN_TITLE_PREFIX = '[サービス]'


def extract_plan_title(note):
    """Pull the display plan title out of a request note, if present."""
    if not note:
        return None
    for line in note.split('\n'):
        if line.startswith(PLAN_TITLE_PREFIX):
            return line[len(PLAN_TITLE_PREFIX):].strip()
    return None


class ServiceRequest(models.Model):
    """A customer's service order awaiting a matched professional"""

    STATUS_PENDING = 'pending'
    STATUS_MATCHED = 'matched'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_MATCHED, 'Matched'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Client contact
    client_name = models.CharField(max_length=100)
    client_email = models.EmailField(db_index=True)
    client_phone = models.CharField(max_length=20, blank=True)

    # Location (resolved by the geocoder at intake)
    address = models.TextField()
    latitude = models.DecimalField(max_digits=9, decimal_places=6)
    longitude = models.DecimalField(max_digits=9, decimal_places=6)

    # Order details
    note = models.TextField(null=True, blank=True)
    service = models.CharField(max_length=30, blank=True)
    plan_key = models.CharField(max_length=50, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    matched_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'requests'
        ordering = ['-created_at']

    def __str__(self):
        return f"Request {self.id} - {self.client_email} - {self.status}"

    @property
    def plan_title(self):
        return extract_plan_title(self.note)


class Match(models.Model):
    """One time-boxed offer of a request to one professional (the offer ledger)."""

    STATUS_WAITING = 'waiting'
    STATUS_ACCEPTED = 'accepted'
    STATUS_REJECTED = 'rejected'
    STATUS_EXPIRED = 'expired'

    STATUS_CHOICES = [
        (STATUS_WAITING, 'Waiting'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_EXPIRED, 'Expired'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    request = models.ForeignKey(
        ServiceRequest,
        on_delete=models.CASCADE,
        related_name='matches'
    )

    professional = models.ForeignKey(
        Professional,
        on_delete=models.CASCADE,
        related_name='matches'
    )

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_WAITING)
    distance_km = models.FloatField(null=True, blank=True)

    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    responded_at = models.DateTimeField(null=True, blank=True)

    # Delivery outcome per channel (best effort, informational)
    email_sent = models.BooleanField(default=False)
    line_sent = models.BooleanField(default=False)

    class Meta:
        db_table = 'matches'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['status', 'expires_at'], name='matches_status_expiry_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['request', 'professional'],
                name='unique_request_professional'
            ),
            models.UniqueConstraint(
                fields=['request'],
                condition=Q(status='accepted'),
                name='unique_accepted_match_per_request'
            ),
        ]

    def __str__(self):
        return f"Match {self.id} - Request {self.request_id} -> Professional {self.professional_id} ({self.status})"
