# testrequests/services/update_service.py
"""
Authoritative test request update service.

All status transitions MUST go through this module.
Never update status or assignments directly in views or serializers.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, Sequence, Type

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from testrequests.exceptions import (
    RequestNotFound,
    ResultValidationError,
    UpdateConflict,
)
from testrequests.models import Consultation, LabResult, TestRequest, TestRequestFlow
from testrequests.permissions import get_user_roles
from testrequests.workflows import (
    ASSIGN_FOR_CONSULTATION,
    ASSIGN_FOR_LAB_TEST,
    OPERATIONS,
    SUBMIT_CONSULTATION,
    SUBMIT_LAB_RESULT,
    validate_transition,
)

logger = logging.getLogger(__name__)


LAB_RESULT_FIELDS = (
    "blood_pressure",
    "heart_beat",
    "temperature",
    "oxygen_level",
    "comments",
    "result",
)

CONSULTATION_FIELDS = (
    "suggestion",
    "comments",
)

# Choice fields accept lowercase input.
_UPPERCASE_FIELDS = {"result", "suggestion"}


# ===============================================================
# Helpers
# ===============================================================

def _build_result(model: Type[models.Model], fields: Sequence[str], payload: Any) -> models.Model:
    """
    Build an unsaved result row from a payload and run model validation.
    Unknown keys are ignored.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ResultValidationError({"non_field_errors": ["Expected an object."]})

    data = {}
    for name in fields:
        value = payload.get(name)
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if name in _UPPERCASE_FIELDS:
                value = value.upper()
        data[name] = value

    instance = model(**data)
    try:
        instance.full_clean(exclude=["request"])
    except DjangoValidationError as e:
        raise ResultValidationError(e.message_dict)
    return instance


def _load_for_update(request_id) -> TestRequest:
    try:
        return TestRequest.objects.select_for_update().get(pk=request_id)
    except (TestRequest.DoesNotExist, ValueError, TypeError):
        raise RequestNotFound(f"Invalid ID: test request {request_id} does not exist")


def _reload(pk: int) -> TestRequest:
    return (
        TestRequest.objects.select_related(
            "created_by",
            "assigned_tester",
            "assigned_doctor",
            "lab_result",
            "consultation",
        )
        .get(pk=pk)
    )


@transaction.atomic
def _run_transition(
    request_id,
    operation: str,
    actor,
    *,
    expected_version: Optional[int] = None,
    assign_field: Optional[str] = None,
    result: Optional[models.Model] = None,
) -> TestRequest:
    """
    Atomically:
      1) Lock and read the request
      2) Check the caller's version, if given
      3) Validate the transition, role and ownership
      4) Conditionally update status/assignment/version
      5) Store the result row (submit operations)
      6) Append a TestRequestFlow row
    """
    instance = _load_for_update(request_id)
    from_status = instance.status

    if expected_version is not None and expected_version != instance.version:
        raise UpdateConflict(
            f"Test request {instance.pk} is at version {instance.version}, "
            f"expected {expected_version}. Reload and retry."
        )

    owner_field = OPERATIONS[operation].owner_field
    to_status = validate_transition(
        from_status,
        operation,
        get_user_roles(actor),
        actor_id=getattr(actor, "pk", None),
        assigned_id=getattr(instance, f"{owner_field}_id") if owner_field else None,
    )

    changes = {
        "status": to_status,
        "version": F("version") + 1,
        "updated_at": timezone.now(),
    }
    if assign_field:
        changes[assign_field] = actor

    updated = TestRequest.objects.filter(
        pk=instance.pk,
        version=instance.version,
    ).update(**changes)
    if updated != 1:
        raise UpdateConflict()

    if result is not None:
        result.request = instance
        result.save()

    TestRequestFlow.objects.create(
        request=instance,
        from_status=from_status,
        to_status=to_status,
        changed_by=actor,
    )

    logger.info(
        "Test request %s: %s -> %s by %s",
        instance.pk,
        from_status,
        to_status,
        actor.get_username(),
    )

    return _reload(instance.pk)


# ===============================================================
# Public operations
# ===============================================================

def assign_for_lab_test(request_id, tester, *, expected_version: Optional[int] = None) -> TestRequest:
    """INITIATED -> LAB_TEST_IN_PROGRESS, binding ``tester`` to the request."""
    return _run_transition(
        request_id,
        ASSIGN_FOR_LAB_TEST,
        tester,
        expected_version=expected_version,
        assign_field="assigned_tester",
    )


def update_lab_test(request_id, lab_result: Any, tester, *, expected_version: Optional[int] = None) -> TestRequest:
    """
    LAB_TEST_IN_PROGRESS -> LAB_TEST_COMPLETED. Only the assigned tester
    may submit. The payload is validated before the request is loaded.
    """
    result = _build_result(LabResult, LAB_RESULT_FIELDS, lab_result)
    return _run_transition(
        request_id,
        SUBMIT_LAB_RESULT,
        tester,
        expected_version=expected_version,
        result=result,
    )


def assign_for_consultation(request_id, doctor, *, expected_version: Optional[int] = None) -> TestRequest:
    """LAB_TEST_COMPLETED -> DIAGNOSIS_IN_PROCESS, binding ``doctor``."""
    return _run_transition(
        request_id,
        ASSIGN_FOR_CONSULTATION,
        doctor,
        expected_version=expected_version,
        assign_field="assigned_doctor",
    )


def update_consultation(request_id, consultation: Any, doctor, *, expected_version: Optional[int] = None) -> TestRequest:
    result = _build_result(Consultation, CONSULTATION_FIELDS, consultation)
    return _run_transition(
        request_id,
        SUBMIT_CONSULTATION,
        doctor,
        expected_version=expected_version,
        result=result,
    )
