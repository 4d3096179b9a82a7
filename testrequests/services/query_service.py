# testrequests/services/query_service.py
"""
Read-only test request lookups. Nothing here mutates state.
"""
from __future__ import annotations

from django.db.models import QuerySet

from testrequests.choices import RequestStatus
from testrequests.exceptions import RequestNotFound
from testrequests.models import TestRequest, TestRequestFlow
from testrequests.workflows import normalize_status


def _base_queryset() -> QuerySet:
    return (
        TestRequest.objects.select_related(
            "created_by",
            "assigned_tester",
            "assigned_doctor",
            "lab_result",
            "consultation",
        )
        .order_by("created_at", "id")
    )


def find_by_status(status) -> QuerySet:
    st = normalize_status(status)
    if not st:
        raise ValueError("status is required")
    if st not in RequestStatus.values:
        raise ValueError(f"Unknown request status: {status}")
    return _base_queryset().filter(status=st)


def find_by_tester(tester) -> QuerySet:
    if tester is None:
        raise ValueError("tester is required")
    return _base_queryset().filter(assigned_tester=tester)


def find_by_doctor(doctor) -> QuerySet:
    if doctor is None:
        raise ValueError("doctor is required")
    return _base_queryset().filter(assigned_doctor=doctor)


def get_test_request(request_id) -> TestRequest:
    try:
        return _base_queryset().get(pk=request_id)
    except (TestRequest.DoesNotExist, ValueError, TypeError):
        raise RequestNotFound(f"Invalid ID: test request {request_id} does not exist")


def get_flow(request_id) -> QuerySet:
    """
    Transition history for one request, oldest first.
    """
    request = get_test_request(request_id)
    return (
        TestRequestFlow.objects.filter(request=request)
        .select_related("changed_by")
        .order_by("created_at", "id")
    )
