from rest_framework import serializers

from professionals.serializers import ProfessionalBasicSerializer
from services.request_management import DECISIONS
from .models import Match, ServiceRequest


def _validate_positive_radius(value):
    if value is not None and value <= 0:
        raise serializers.ValidationError("radius_km must be greater than 0")
    return value


class ServiceRequestSerializer(serializers.ModelSerializer):
    """Summary row for the customer dashboard"""
    plan_title = serializers.CharField(read_only=True, allow_null=True)

    class Meta:
        model = ServiceRequest
        fields = ['id', 'created_at', 'status', 'plan_title', 'address']
        read_only_fields = fields


class ServiceRequestDetailSerializer(serializers.ModelSerializer):
    """Full request as seen by its own client"""
    plan_title = serializers.CharField(read_only=True, allow_null=True)

    class Meta:
        model = ServiceRequest
        fields = ['id', 'created_at', 'status', 'plan_title', 'address', 'note',
                  'client_name', 'client_email', 'client_phone', 'service',
                  'plan_key', 'latitude', 'longitude', 'matched_at']
        read_only_fields = fields


class MatchSerializer(serializers.ModelSerializer):
    """Serializer for one offer in the match ledger"""
    professional = ProfessionalBasicSerializer(read_only=True)

    class Meta:
        model = Match
        fields = ['id', 'request', 'professional', 'status', 'distance_km',
                  'expires_at', 'created_at', 'responded_at', 'email_sent', 'line_sent']
        read_only_fields = fields


class AdminServiceRequestSerializer(serializers.ModelSerializer):
    """Admin listing with client contact and the accepted professional, if any"""
    plan_title = serializers.SerializerMethodField()
    matched_professional = serializers.SerializerMethodField()
    matches = MatchSerializer(many=True, read_only=True)

    class Meta:
        model = ServiceRequest
        fields = ['id', 'created_at', 'status', 'client_name', 'client_email',
                  'client_phone', 'address', 'plan_title', 'matched_at',
                  'matched_professional', 'matches']
        read_only_fields = fields

    def get_plan_title(self, obj):
        return obj.plan_title or ''

    def get_matched_professional(self, obj):
        for match in obj.matches.all():
            if match.status == Match.STATUS_ACCEPTED:
                return ProfessionalBasicSerializer(match.professional).data
        return None


class ServiceRequestCreateSerializer(serializers.Serializer):
    """Serializer for the order form submission"""
    client_name = serializers.CharField(max_length=100)
    client_email = serializers.EmailField()
    address = serializers.CharField(max_length=500)
    note = serializers.CharField(required=False, allow_blank=True, default='')
    client_phone = serializers.CharField(required=False, allow_blank=True, max_length=20, default='')
    service = serializers.CharField(required=False, allow_blank=True, max_length=30, default='')
    plan_key = serializers.CharField(required=False, allow_blank=True, max_length=50, default='')
    radius_km = serializers.FloatField(required=False)

    def validate_radius_km(self, value):
        return _validate_positive_radius(value)


class AdvanceSerializer(serializers.Serializer):
    request_id = serializers.UUIDField()
    radius_km = serializers.FloatField(required=False)

    def validate_radius_km(self, value):
        return _validate_positive_radius(value)


class RespondQuerySerializer(serializers.Serializer):
    """Query string of the accept/reject link"""
    id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=DECISIONS)


class MyRequestsQuerySerializer(serializers.Serializer):
    client_email = serializers.CharField(max_length=254, trim_whitespace=True)
    id = serializers.UUIDField(required=False)
