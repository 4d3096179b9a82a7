# testrequests/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import HealthCheckView, TestRequestViewSet
from .views_consultation import ConsultationViewSet
from .views_lab import LabRequestViewSet


app_name = "testrequests"

# -------------------------------------------------
# Router
# -------------------------------------------------
router = DefaultRouter()
router.register(r"lab-requests", LabRequestViewSet, basename="lab-request")
router.register(r"consultations", ConsultationViewSet, basename="consultation")
router.register(r"test-requests", TestRequestViewSet, basename="test-request")


urlpatterns = [
    # ============================================================
    # System
    # ============================================================
    path("health/", HealthCheckView.as_view(), name="health_check"),

    # ============================================================
    # Workflow API
    # ============================================================
    path("", include(router.urls)),
]
