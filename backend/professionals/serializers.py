from rest_framework import serializers
from professionals.models import Professional, PlanRequirement


class ProfessionalBasicSerializer(serializers.ModelSerializer):
    """
    Lite version of professional info for match details
    (shown to staff in request listings).
    """

    class Meta:
        model = Professional
        fields = [
            "id",
            "name",
            "email",
            "labels",
        ]


class PlanRequirementSerializer(serializers.ModelSerializer):
    """
    Serializer for listing and upserting plan label requirements.
    """
    required_labels = serializers.ListField(
        child=serializers.CharField(max_length=50),
        allow_empty=True,
    )

    class Meta:
        model = PlanRequirement
        fields = ["service", "plan_key", "required_labels"]
        # upsert semantics: let the view resolve conflicts on (service, plan_key)
        validators = []
