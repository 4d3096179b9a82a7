# testrequests/tests/test_consultations_api.py
import pytest

from testrequests.models import Consultation


pytestmark = pytest.mark.django_db


def _login(api_client, username):
    assert api_client.login(username=username, password="pass123") is True


def test_in_queue_lists_lab_completed_requests(api_client, make_test_request, tester, doctor):
    ready = make_test_request(status="LAB_TEST_COMPLETED", assigned_tester=tester)
    make_test_request(status="LAB_TEST_IN_PROGRESS", assigned_tester=tester)
    make_test_request()

    _login(api_client, "doctor1")
    resp = api_client.get("/api/consultations/in-queue/")

    assert resp.status_code == 200
    assert [r["id"] for r in resp.json()] == [ready.id]
    assert resp.json()[0]["lab_result"]["result"] == "POSITIVE"


def test_doctor_takes_and_completes_consultation(
    api_client, make_test_request, tester, doctor, consultation_payload
):
    req = make_test_request(status="LAB_TEST_COMPLETED", assigned_tester=tester)
    _login(api_client, "doctor1")

    resp = api_client.put(f"/api/consultations/{req.id}/assign/", {}, format="json")
    assert resp.status_code == 200
    assert resp.json()["status"] == "DIAGNOSIS_IN_PROCESS"
    assert resp.json()["assigned_doctor"]["username"] == "doctor1"

    resp = api_client.get("/api/consultations/")
    assert [r["id"] for r in resp.json()] == [req.id]

    resp = api_client.put(f"/api/consultations/{req.id}/update/", consultation_payload, format="json")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "COMPLETED"
    assert body["consultation"]["suggestion"] == "HOME_QUARANTINE"
    assert body["assigned_tester"]["username"] == "tester1"


def test_other_doctor_cannot_submit(
    api_client, make_test_request, tester, doctor, other_doctor, consultation_payload
):
    req = make_test_request(status="DIAGNOSIS_IN_PROCESS", assigned_tester=tester, assigned_doctor=doctor)

    _login(api_client, "doctor2")
    resp = api_client.put(f"/api/consultations/{req.id}/update/", consultation_payload, format="json")

    assert resp.status_code == 400
    assert "detail" in resp.json()
    assert not Consultation.objects.filter(request=req).exists()


def test_assign_requires_completed_lab_test(api_client, make_test_request, doctor):
    req = make_test_request()

    _login(api_client, "doctor1")
    resp = api_client.put(f"/api/consultations/{req.id}/assign/", {}, format="json")

    assert resp.status_code == 400
    req.refresh_from_db()
    assert req.status == "INITIATED"
    assert req.assigned_doctor is None


def test_missing_suggestion_is_a_field_error(api_client, make_test_request, tester, doctor):
    req = make_test_request(status="DIAGNOSIS_IN_PROCESS", assigned_tester=tester, assigned_doctor=doctor)

    _login(api_client, "doctor1")
    resp = api_client.put(f"/api/consultations/{req.id}/update/", {"comments": "fine"}, format="json")

    assert resp.status_code == 400
    assert "suggestion" in resp.json()


def test_tester_is_forbidden(api_client, make_test_request, tester):
    req = make_test_request(status="LAB_TEST_COMPLETED", assigned_tester=tester)

    _login(api_client, "tester1")
    assert api_client.get("/api/consultations/in-queue/").status_code == 403
    assert api_client.put(f"/api/consultations/{req.id}/assign/", {}, format="json").status_code == 403


def test_list_accepts_status_filter(api_client, make_test_request, tester, doctor):
    done = make_test_request(status="COMPLETED", assigned_tester=tester, assigned_doctor=doctor)
    make_test_request(status="DIAGNOSIS_IN_PROCESS", assigned_tester=tester, assigned_doctor=doctor)

    _login(api_client, "doctor1")
    resp = api_client.get("/api/consultations/", {"status": "COMPLETED"})

    assert resp.status_code == 200
    assert [r["id"] for r in resp.json()] == [done.id]
