from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAdminUser

from professionals.models import PlanRequirement
from professionals.serializers import PlanRequirementSerializer
from professionals import services


class PlanRequirementView(APIView):
    """
    GET:  list plan label requirements
    POST: upsert one requirement

    POST Body:
    {
        "service": "photo",
        "plan_key": "photo-20",
        "required_labels": ["real_estate"]
    }
    """
    permission_classes = [IsAdminUser]

    def get(self, request):
        requirements = PlanRequirement.objects.order_by("service", "plan_key")
        serializer = PlanRequirementSerializer(requirements, many=True)
        return Response({"ok": True, "items": serializer.data})

    def post(self, request):
        serializer = PlanRequirementSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"ok": False, "error": "invalid payload", "details": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        data = serializer.validated_data
        services.upsert_plan_requirement(
            service=data["service"],
            plan_key=data["plan_key"],
            required_labels=data["required_labels"],
        )
        return Response({"ok": True})
