# testrequests/views_consultation.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .choices import RequestStatus
from .filters import TestRequestFilter
from .models import TestRequest
from .permissions import IsDoctor
from .serializers import AssignSerializer, ConsultationUpdateSerializer, TestRequestSerializer
from .services import query_service, update_service
from .views import parse_version, run_workflow_call


@extend_schema(tags=["Consultations"])
class ConsultationViewSet(viewsets.GenericViewSet):
    """
    Doctor-facing endpoints.

    GET /api/consultations/               requests assigned to the caller
    GET /api/consultations/in-queue/      LAB_TEST_COMPLETED requests awaiting a doctor
    PUT /api/consultations/<pk>/assign/   take a request for consultation
    PUT /api/consultations/<pk>/update/   submit the diagnosis
    """

    permission_classes = [IsAuthenticated, IsDoctor]
    serializer_class = TestRequestSerializer
    filterset_class = TestRequestFilter

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return TestRequest.objects.none()
        return query_service.find_by_doctor(self.request.user)

    def list(self, request):
        qs = self.filter_queryset(self.get_queryset())
        return Response(TestRequestSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path="in-queue", filterset_class=None)
    def in_queue(self, request):
        qs = query_service.find_by_status(RequestStatus.LAB_TEST_COMPLETED)
        return Response(TestRequestSerializer(qs, many=True).data)

    @extend_schema(request=AssignSerializer, responses=TestRequestSerializer)
    @action(detail=True, methods=["put"])
    def assign(self, request, pk=None):
        updated = run_workflow_call(
            update_service.assign_for_consultation,
            pk,
            request.user,
            expected_version=parse_version(request),
        )
        return Response(TestRequestSerializer(updated).data)

    @extend_schema(request=ConsultationUpdateSerializer, responses=TestRequestSerializer)
    @action(detail=True, methods=["put"], url_path="update", url_name="update-result")
    def update_result(self, request, pk=None):
        updated = run_workflow_call(
            update_service.update_consultation,
            pk,
            request.data,
            request.user,
            expected_version=parse_version(request),
        )
        return Response(TestRequestSerializer(updated).data)
