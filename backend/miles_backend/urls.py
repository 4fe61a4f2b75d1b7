from django.contrib import admin
from django.urls import path, include

from .views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path("health/", health_check), # Health check endpoint

    # Staff APIs for professionals (at /api/admin/plan-requirements/)
    path('api/admin/', include('professionals.urls')),

    # Request, matching and offer-link endpoints (at /api/)
    path('api/', include('service_requests.urls')),
]
