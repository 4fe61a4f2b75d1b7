from django.db import models


class Professional(models.Model):
    """A service professional who can receive offers for nearby requests"""

    name = models.CharField(max_length=100)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True)

    # Push channel (LINE Messaging API user id)
    line_user_id = models.CharField(max_length=64, null=True, blank=True)

    # Base location used for proximity matching
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    # Skill tags, e.g. ["real_estate", "drone"]
    labels = models.JSONField(default=list, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'professionals'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} <{self.email}>"

    def has_labels(self, required) -> bool:
        labels = self.labels if isinstance(self.labels, list) else []
        return all(label in labels for label in required)


class PlanRequirement(models.Model):
    """Labels a professional must carry to be offered requests for a plan."""

    service = models.CharField(max_length=30)
    plan_key = models.CharField(max_length=50)
    required_labels = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'plan_requirements'
        ordering = ['service', 'plan_key']
        constraints = [
            models.UniqueConstraint(
                fields=['service', 'plan_key'],
                name='unique_service_plan'
            )
        ]

    def __str__(self):
        return f"{self.service}/{self.plan_key}"
