# testrequests/exceptions.py
"""
Domain failures raised by the workflow core.

Services raise these; only the API layer translates them into
HTTP responses (see ``to_api_exception``).
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from rest_framework import exceptions as drf_exceptions
from rest_framework import status


class WorkflowError(Exception):
    default_message = "Test request workflow error."
    retryable = False

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class RequestNotFound(WorkflowError):
    default_message = "Invalid ID"


class InvalidTransition(WorkflowError):
    default_message = "Invalid ID or State"


class NotAssignedActor(WorkflowError):
    default_message = "Test request is assigned to another user."


class RoleNotPermitted(WorkflowError):
    default_message = "User does not hold the role required for this operation."


class ResultValidationError(WorkflowError):
    default_message = "Invalid result payload."

    def __init__(self, errors: Dict[str, Any], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message)


class UpdateConflict(WorkflowError):
    default_message = "Test request was modified concurrently. Reload and retry."
    retryable = True


# ===============================================================
# API translation
# ===============================================================

class WorkflowRejected(drf_exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request rejected."
    default_code = "workflow_rejected"


class WorkflowConflict(drf_exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflicting update."
    default_code = "conflict"


def to_api_exception(exc: WorkflowError) -> drf_exceptions.APIException:
    if isinstance(exc, ResultValidationError):
        return drf_exceptions.ValidationError(exc.errors)
    if isinstance(exc, UpdateConflict):
        return WorkflowConflict(exc.message)
    if isinstance(exc, RoleNotPermitted):
        return drf_exceptions.PermissionDenied(exc.message)
    return WorkflowRejected(exc.message)
