# testrequests/tests/test_flow_validator.py
from __future__ import annotations

import pytest

import testrequests.workflows as w
from testrequests.exceptions import InvalidTransition, NotAssignedActor, RoleNotPermitted
from testrequests.workflows import (
    ASSIGN_FOR_CONSULTATION,
    ASSIGN_FOR_LAB_TEST,
    OPERATIONS,
    STATUS_SEQUENCE,
    SUBMIT_CONSULTATION,
    SUBMIT_LAB_RESULT,
)


TABLE = [
    (ASSIGN_FOR_LAB_TEST, "INITIATED", "TESTER", "LAB_TEST_IN_PROGRESS"),
    (SUBMIT_LAB_RESULT, "LAB_TEST_IN_PROGRESS", "TESTER", "LAB_TEST_COMPLETED"),
    (ASSIGN_FOR_CONSULTATION, "LAB_TEST_COMPLETED", "DOCTOR", "DIAGNOSIS_IN_PROCESS"),
    (SUBMIT_CONSULTATION, "DIAGNOSIS_IN_PROCESS", "DOCTOR", "COMPLETED"),
]


def test_workflows_public_api_contract():
    required = {
        "can_transition",
        "next_status",
        "validate_transition",
        "has_role",
        "allowed_operations",
        "workflow_definition",
        "normalize_role",
        "is_terminal",
    }

    missing = sorted(required - set(dir(w)))
    assert not missing, f"Workflows API missing exports: {missing}"


@pytest.mark.parametrize("operation,current,role,target", TABLE)
def test_table_transitions_allowed(operation, current, role, target):
    assert w.can_transition(current, operation, role) is True
    assert w.next_status(operation) == target


@pytest.mark.parametrize("operation,current,role,target", TABLE)
def test_any_other_status_is_rejected(operation, current, role, target):
    for status in STATUS_SEQUENCE:
        if status == current:
            continue
        assert w.can_transition(status, operation, role) is False
        with pytest.raises(InvalidTransition):
            w.validate_transition(status, operation, [role], actor_id=1, assigned_id=1)


def test_wrong_role_cannot_transition():
    assert w.can_transition("INITIATED", ASSIGN_FOR_LAB_TEST, "DOCTOR") is False
    assert w.can_transition("LAB_TEST_COMPLETED", ASSIGN_FOR_CONSULTATION, "TESTER") is False
    assert w.can_transition("INITIATED", ASSIGN_FOR_LAB_TEST, "ADMIN") is False

    with pytest.raises(RoleNotPermitted):
        w.validate_transition("INITIATED", ASSIGN_FOR_LAB_TEST, ["DOCTOR", "ADMIN"])


def test_status_is_checked_before_role():
    # A doctor poking a lab-stage request learns about the state first
    with pytest.raises(InvalidTransition):
        w.validate_transition("LAB_TEST_IN_PROGRESS", ASSIGN_FOR_CONSULTATION, ["TESTER"])


def test_submit_requires_the_assigned_actor():
    assert (
        w.validate_transition("LAB_TEST_IN_PROGRESS", SUBMIT_LAB_RESULT, ["TESTER"], actor_id=5, assigned_id=5)
        == "LAB_TEST_COMPLETED"
    )

    with pytest.raises(NotAssignedActor):
        w.validate_transition("LAB_TEST_IN_PROGRESS", SUBMIT_LAB_RESULT, ["TESTER"], actor_id=6, assigned_id=5)

    with pytest.raises(NotAssignedActor):
        w.validate_transition("DIAGNOSIS_IN_PROCESS", SUBMIT_CONSULTATION, ["DOCTOR"], actor_id=6, assigned_id=None)


def test_assignment_ignores_ownership():
    assert w.validate_transition("INITIATED", ASSIGN_FOR_LAB_TEST, ["TESTER"], actor_id=9) == "LAB_TEST_IN_PROGRESS"


def test_operations_advance_exactly_one_stage():
    for op in OPERATIONS.values():
        assert STATUS_SEQUENCE.index(op.to_status) == STATUS_SEQUENCE.index(op.from_status) + 1


def test_completed_is_terminal_and_accepts_nothing():
    assert w.is_terminal("COMPLETED")
    assert not w.is_terminal("DIAGNOSIS_IN_PROCESS")
    assert w.allowed_operations("COMPLETED", ["TESTER", "DOCTOR", "ADMIN"], actor_id=1) == []

    for name in OPERATIONS:
        with pytest.raises(InvalidTransition):
            w.validate_transition("COMPLETED", name, ["TESTER", "DOCTOR"], actor_id=1, assigned_id=1)


def test_unknown_operation_raises_value_error():
    with pytest.raises(ValueError):
        w.next_status("REASSIGN")


def test_has_role_normalizes_input():
    assert w.has_role({"tester"}, "TESTER")
    assert w.has_role(["ROLE_DOCTOR"], "DOCTOR")
    assert w.has_role("ADMIN", "admin")
    assert not w.has_role([], "TESTER")
    assert not w.has_role(["ADMIN"], "TESTER")


def test_allowed_operations_depend_on_role_and_assignment():
    assigned = {"assigned_tester": 3, "assigned_doctor": None}

    assert w.allowed_operations("INITIATED", ["TESTER"]) == [ASSIGN_FOR_LAB_TEST]
    assert w.allowed_operations("INITIATED", ["DOCTOR"]) == []
    assert w.allowed_operations("LAB_TEST_IN_PROGRESS", ["TESTER"], actor_id=3, assigned=assigned) == [SUBMIT_LAB_RESULT]
    assert w.allowed_operations("LAB_TEST_IN_PROGRESS", ["TESTER"], actor_id=4, assigned=assigned) == []


def test_validation_is_deterministic():
    args = ("INITIATED", ASSIGN_FOR_LAB_TEST, ["TESTER"])
    assert w.validate_transition(*args) == w.validate_transition(*args)


def test_workflow_definition_is_json_shaped():
    d = w.workflow_definition()

    assert d["states"] == [
        "INITIATED",
        "LAB_TEST_IN_PROGRESS",
        "LAB_TEST_COMPLETED",
        "DIAGNOSIS_IN_PROCESS",
        "COMPLETED",
    ]
    assert d["terminal"] == ["COMPLETED"]
    by_name = {op["name"]: op for op in d["operations"]}
    assert by_name[SUBMIT_LAB_RESULT]["requires_assignee"] is True
    assert by_name[ASSIGN_FOR_CONSULTATION]["role"] == "DOCTOR"


def test_exports_match_the_public_surface():
    assert set(w.__all__) == {
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
    }
    assert not hasattr(w, "required_role")


def test_only_stored_role_names_are_recognised():
    assert w.normalize_role("role_tester") == "TESTER"
    assert not w.has_role(["LAB_TESTER"], "TESTER")
