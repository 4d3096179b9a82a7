# testrequests/workflows/__init__.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Set

from testrequests.choices import RequestStatus, Role
from testrequests.exceptions import (
    InvalidTransition,
    NotAssignedActor,
    RoleNotPermitted,
)


# ===============================================================
# Canonical workflow definition
# ===============================================================

STATUS_SEQUENCE: tuple = (
    RequestStatus.INITIATED,
    RequestStatus.LAB_TEST_IN_PROGRESS,
    RequestStatus.LAB_TEST_COMPLETED,
    RequestStatus.DIAGNOSIS_IN_PROCESS,
    RequestStatus.COMPLETED,
)

TERMINAL_STATES: Set[str] = {str(RequestStatus.COMPLETED)}

ASSIGN_FOR_LAB_TEST = "ASSIGN_FOR_LAB_TEST"
SUBMIT_LAB_RESULT = "SUBMIT_LAB_RESULT"
ASSIGN_FOR_CONSULTATION = "ASSIGN_FOR_CONSULTATION"
SUBMIT_CONSULTATION = "SUBMIT_CONSULTATION"


class Operation(NamedTuple):
    name: str
    from_status: str
    role: str
    to_status: str
    # Field holding the actor that must perform this operation, if any.
    owner_field: Optional[str]


OPERATIONS: Dict[str, Operation] = {
    ASSIGN_FOR_LAB_TEST: Operation(
        ASSIGN_FOR_LAB_TEST,
        RequestStatus.INITIATED,
        Role.TESTER,
        RequestStatus.LAB_TEST_IN_PROGRESS,
        None,
    ),
    SUBMIT_LAB_RESULT: Operation(
        SUBMIT_LAB_RESULT,
        RequestStatus.LAB_TEST_IN_PROGRESS,
        Role.TESTER,
        RequestStatus.LAB_TEST_COMPLETED,
        "assigned_tester",
    ),
    ASSIGN_FOR_CONSULTATION: Operation(
        ASSIGN_FOR_CONSULTATION,
        RequestStatus.LAB_TEST_COMPLETED,
        Role.DOCTOR,
        RequestStatus.DIAGNOSIS_IN_PROCESS,
        None,
    ),
    SUBMIT_CONSULTATION: Operation(
        SUBMIT_CONSULTATION,
        RequestStatus.DIAGNOSIS_IN_PROCESS,
        Role.DOCTOR,
        RequestStatus.COMPLETED,
        "assigned_doctor",
    ),
}


# ===============================================================
# Normalization
# ===============================================================

ROLE_ALIASES: Dict[str, str] = {
    "TESTER": Role.TESTER,
    "DOCTOR": Role.DOCTOR,
    "ADMIN": Role.ADMIN,
    "SUPERUSER": Role.ADMIN,
}


def normalize_status(value: Any) -> str:
    return str(value or "").strip().upper()


def normalize_role(value: Any) -> str:
    raw = str(value or "").strip().upper()
    if raw.startswith("ROLE_"):
        raw = raw[len("ROLE_"):]
    return str(ROLE_ALIASES.get(raw, raw))


def _normalize_roles(roles: Iterable[Any]) -> Set[str]:
    if isinstance(roles, str):
        roles = [roles]
    return {normalize_role(r) for r in (roles or ()) if r}


def _operation(operation: str) -> Operation:
    op = OPERATIONS.get(normalize_status(operation))
    if op is None:
        raise ValueError(f"Unknown workflow operation: {operation}")
    return op


# ===============================================================
# Public workflow API
# ===============================================================

def has_role(roles: Iterable[Any], required_role: str) -> bool:
    """
    Capability predicate shared by the API role guard and the services.
    """
    return normalize_role(required_role) in _normalize_roles(roles)


def is_terminal(status: str) -> bool:
    return normalize_status(status) in TERMINAL_STATES


def next_status(operation: str) -> str:
    return _operation(operation).to_status


def can_transition(current_status: str, operation: str, role: str) -> bool:
    op = _operation(operation)
    return (
        normalize_status(current_status) == op.from_status
        and normalize_role(role) == op.role
    )


def validate_transition(
    current_status: str,
    operation: str,
    roles: Iterable[Any],
    actor_id: Optional[int] = None,
    assigned_id: Optional[int] = None,
) -> str:
    """
    Raises a WorkflowError if ``operation`` may not run on a request in
    ``current_status`` for an actor holding ``roles``.

    For submit operations ``assigned_id`` is the id of the actor bound to the
    request and must equal ``actor_id``.

    Returns the resulting status.
    """
    op = _operation(operation)
    cur = normalize_status(current_status)

    if cur != op.from_status:
        raise InvalidTransition(
            f"Invalid ID or State: {op.name} requires status {op.from_status}, "
            f"request is {cur or 'UNKNOWN'}"
        )

    if not has_role(roles, op.role):
        raise RoleNotPermitted(f"{op.name} requires role {op.role}")

    if op.owner_field is not None:
        if assigned_id is None or actor_id is None or assigned_id != actor_id:
            raise NotAssignedActor(
                "Test request is not assigned to the current user"
            )

    return op.to_status


def allowed_operations(
    current_status: str,
    roles: Iterable[Any],
    actor_id: Optional[int] = None,
    assigned: Optional[Dict[str, Optional[int]]] = None,
) -> List[str]:
    """
    Operations the actor may perform next. ``assigned`` maps owner fields
    (``assigned_tester`` / ``assigned_doctor``) to user ids.
    """
    cur = normalize_status(current_status)
    role_set = _normalize_roles(roles)
    assigned = assigned or {}

    out: List[str] = []
    for op in OPERATIONS.values():
        if op.from_status != cur or str(op.role) not in role_set:
            continue
        if op.owner_field is not None:
            owner = assigned.get(op.owner_field)
            if owner is None or owner != actor_id:
                continue
        out.append(op.name)
    return out


def workflow_definition() -> Dict[str, Any]:
    """
    Stable JSON-serializable definition for clients.
    """
    return {
        "states": [str(s) for s in STATUS_SEQUENCE],
        "terminal": sorted(str(s) for s in TERMINAL_STATES),
        "operations": [
            {
                "name": op.name,
                "from": str(op.from_status),
                "to": str(op.to_status),
                "role": str(op.role),
                "requires_assignee": op.owner_field is not None,
            }
            for op in OPERATIONS.values()
        ],
    }


__all__ = [
    "STATUS_SEQUENCE",
    "TERMINAL_STATES",
    "OPERATIONS",
    "ASSIGN_FOR_LAB_TEST",
    "SUBMIT_LAB_RESULT",
    "ASSIGN_FOR_CONSULTATION",
    "SUBMIT_CONSULTATION",
    "normalize_status",
    "normalize_role",
    "has_role",
    "is_terminal",
    "next_status",
    "can_transition",
    "validate_transition",
    "allowed_operations",
    "workflow_definition",
]
