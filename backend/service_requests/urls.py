from django.urls import path
from . import views

app_name = 'service_requests'

urlpatterns = [
    # Customer APIs
    path('requests/create/', views.create_request, name='create-request'),
    path('my-requests/', views.my_requests, name='my-requests'),

    # Offer link target (emailed / pushed to professionals)
    path('match/respond/', views.respond, name='match-respond'),

    # Internal triggers (X-Internal-Token)
    path('match/next/', views.match_next, name='match-next'),
    path('match/check-expired/', views.check_expired, name='match-check-expired'),

    # Admin APIs
    path('admin/requests/', views.AdminRequestListView.as_view(), name='admin-requests'),
]
