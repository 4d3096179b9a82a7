# testrequests/tests/conftest.py

from __future__ import annotations

import uuid
from typing import Any, Callable, Iterable, Optional

import pytest
from django.contrib.auth import authenticate, get_user_model
from rest_framework.test import APIClient

from testrequests.choices import DoctorSuggestion, RequestStatus, TestResult
from testrequests.models import Consultation, LabResult, TestRequest, UserRole
from testrequests.workflows import STATUS_SEQUENCE


def _rand(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _reached(status: str, stage: str) -> bool:
    return STATUS_SEQUENCE.index(status) >= STATUS_SEQUENCE.index(stage)


@pytest.fixture(autouse=True)
def _plain_http_in_tests(settings):
    # Secure cookies and HTTPS redirects get in the way of the test client
    settings.SECURE_SSL_REDIRECT = False
    settings.SESSION_COOKIE_SECURE = False
    settings.CSRF_COOKIE_SECURE = False


class AuthAPIClient(APIClient):
    """
    Test client that uses force_authenticate for predictable DRF auth.
    """

    _user = None

    def login(self, username: str, password: str, **kwargs) -> bool:  # type: ignore[override]
        user = authenticate(username=username, password=password)
        if not user:
            return False
        self.force_authenticate(user=user)
        self._user = user
        return True

    def logout(self) -> None:  # type: ignore[override]
        # force_authenticate(user=None) would call logout() again
        super().logout()
        self.handler._force_user = None
        self.handler._force_token = None
        self._user = None


@pytest.fixture
def api_client() -> AuthAPIClient:
    return AuthAPIClient()


@pytest.fixture
def user_factory(db) -> Callable[..., Any]:
    User = get_user_model()

    def _factory(username: Optional[str] = None, roles: Iterable[str] = (), **extra: Any):
        user = User.objects.create_user(
            username=username or _rand("user"),
            password="pass123",
            **extra,
        )
        for role in roles:
            UserRole.objects.create(user=user, role=role)
        return user

    return _factory


@pytest.fixture
def requester(user_factory):
    return user_factory("requester")


@pytest.fixture
def tester(user_factory):
    return user_factory("tester1", roles=["TESTER"])


@pytest.fixture
def other_tester(user_factory):
    return user_factory("tester2", roles=["TESTER"])


@pytest.fixture
def doctor(user_factory):
    return user_factory("doctor1", roles=["DOCTOR"])


@pytest.fixture
def other_doctor(user_factory):
    return user_factory("doctor2", roles=["DOCTOR"])


@pytest.fixture
def lab_result_payload() -> dict:
    return {
        "blood_pressure": "120/80",
        "heart_beat": "72",
        "temperature": "98.6",
        "oxygen_level": "97",
        "comments": "Swab collected, RT-PCR run",
        "result": TestResult.NEGATIVE,
    }


@pytest.fixture
def consultation_payload() -> dict:
    return {
        "suggestion": DoctorSuggestion.HOME_QUARANTINE,
        "comments": "Isolate for seven days",
    }


@pytest.fixture
def make_test_request(db, requester) -> Callable[..., TestRequest]:
    """
    Factory for requests at any stage. Result rows are created to match
    the status; pass assigned_tester / assigned_doctor for later stages.
    """

    def _factory(
        *,
        status: str = RequestStatus.INITIATED,
        assigned_tester=None,
        assigned_doctor=None,
        **extra: Any,
    ) -> TestRequest:
        kwargs = {
            "name": _rand("Patient"),
            "age": 34,
            "gender": "FEMALE",
            "email": "patient@example.com",
            "phone_number": "9876543210",
            "address": "12 MG Road, Bengaluru",
            "pin_code": "560001",
            "created_by": requester,
            "status": status,
            "assigned_tester": assigned_tester,
            "assigned_doctor": assigned_doctor,
        }
        kwargs.update(extra)
        request = TestRequest.objects.create(**kwargs)

        if _reached(status, RequestStatus.LAB_TEST_COMPLETED):
            LabResult.objects.create(
                request=request,
                blood_pressure="118/76",
                heart_beat="70",
                temperature="98.4",
                oxygen_level="98",
                result=TestResult.POSITIVE,
            )
        if _reached(status, RequestStatus.COMPLETED):
            Consultation.objects.create(
                request=request,
                suggestion=DoctorSuggestion.ADMIT,
            )
        return request

    return _factory
