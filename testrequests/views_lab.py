# testrequests/views_lab.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .choices import RequestStatus
from .filters import TestRequestFilter
from .models import TestRequest
from .permissions import IsTester
from .serializers import AssignSerializer, LabResultUpdateSerializer, TestRequestSerializer
from .services import query_service, update_service
from .views import parse_version, run_workflow_call


@extend_schema(tags=["Lab requests"])
class LabRequestViewSet(viewsets.GenericViewSet):
    """
    Tester-facing endpoints.

    GET /api/lab-requests/                 requests assigned to the caller
    GET /api/lab-requests/to-be-tested/    INITIATED requests awaiting a tester
    PUT /api/lab-requests/<pk>/assign/     take a request for lab testing
    PUT /api/lab-requests/<pk>/update/     submit the lab result
    """

    permission_classes = [IsAuthenticated, IsTester]
    serializer_class = TestRequestSerializer
    filterset_class = TestRequestFilter

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return TestRequest.objects.none()
        return query_service.find_by_tester(self.request.user)

    def list(self, request):
        qs = self.filter_queryset(self.get_queryset())
        return Response(TestRequestSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path="to-be-tested", filterset_class=None)
    def to_be_tested(self, request):
        qs = query_service.find_by_status(RequestStatus.INITIATED)
        return Response(TestRequestSerializer(qs, many=True).data)

    @extend_schema(request=AssignSerializer, responses=TestRequestSerializer)
    @action(detail=True, methods=["put"])
    def assign(self, request, pk=None):
        updated = run_workflow_call(
            update_service.assign_for_lab_test,
            pk,
            request.user,
            expected_version=parse_version(request),
        )
        return Response(TestRequestSerializer(updated).data)

    @extend_schema(request=LabResultUpdateSerializer, responses=TestRequestSerializer)
    @action(detail=True, methods=["put"], url_path="update", url_name="update-result")
    def update_result(self, request, pk=None):
        updated = run_workflow_call(
            update_service.update_lab_test,
            pk,
            request.data,
            request.user,
            expected_version=parse_version(request),
        )
        return Response(TestRequestSerializer(updated).data)
