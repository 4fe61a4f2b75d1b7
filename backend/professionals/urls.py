from django.urls import path
from .views import PlanRequirementView

app_name = "professionals"

urlpatterns = [
    path("plan-requirements/", PlanRequirementView.as_view(), name="plan-requirements"),
]
