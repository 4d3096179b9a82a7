# testrequests/views.py
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import WorkflowError, to_api_exception
from .permissions import IsWorkflowActor, get_user_roles
from .serializers import TestRequestFlowSerializer
from .services import query_service
from .workflows import allowed_operations, workflow_definition

logger = logging.getLogger(__name__)


# ===============================================================
# Utilities
# ===============================================================
def run_workflow_call(fn: Callable[..., Any], *args, **kwargs) -> Any:
    """
    Call a service function, translating domain failures into DRF
    exceptions. Never retries.
    """
    try:
        return fn(*args, **kwargs)
    except WorkflowError as exc:
        logger.warning("%s rejected: %s", fn.__name__, exc.message)
        raise to_api_exception(exc) from exc


def parse_version(request) -> Optional[int]:
    """
    Optional optimistic-lock version from the request body.
    """
    data = getattr(request, "data", None) or {}
    if not hasattr(data, "get"):
        return None

    raw = data.get("version")
    if raw is None or raw == "":
        return None
    try:
        version = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError({"version": "A valid integer is required."})
    if version < 0:
        raise ValidationError({"version": "Must be zero or greater."})
    return version


# ===============================================================
# Health
# ===============================================================
class HealthCheckView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(tags=["System"])
    def get(self, request):
        return Response({"status": "ok", "service": "UPSTAC"})


# ===============================================================
# Test request introspection (history, allowed operations)
# ===============================================================
class TestRequestViewSet(viewsets.ViewSet):
    """
    GET /api/test-requests/workflow/        static workflow definition
    GET /api/test-requests/<pk>/flow/       transition history, oldest first
    GET /api/test-requests/<pk>/allowed/    operations the caller may perform
    """

    permission_classes = [IsAuthenticated, IsWorkflowActor]

    @extend_schema(tags=["Test requests"])
    @action(detail=False, methods=["get"])
    def workflow(self, request):
        return Response(workflow_definition())

    @extend_schema(tags=["Test requests"], responses=TestRequestFlowSerializer(many=True))
    @action(detail=True, methods=["get"])
    def flow(self, request, pk=None):
        flows = run_workflow_call(query_service.get_flow, pk)
        return Response(
            {
                "id": int(pk),
                "history": TestRequestFlowSerializer(flows, many=True).data,
            }
        )

    @extend_schema(tags=["Test requests"])
    @action(detail=True, methods=["get"])
    def allowed(self, request, pk=None):
        instance = run_workflow_call(query_service.get_test_request, pk)
        roles = get_user_roles(request.user)

        allowed = allowed_operations(
            instance.status,
            roles,
            actor_id=request.user.pk,
            assigned={
                "assigned_tester": instance.assigned_tester_id,
                "assigned_doctor": instance.assigned_doctor_id,
            },
        )

        return Response(
            {
                "id": instance.pk,
                "status": instance.status,
                "allowed": allowed,
                "roles": sorted(roles),
            }
        )
