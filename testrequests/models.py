# testrequests/models.py

from django.conf import settings
from django.core.validators import MaxValueValidator
from django.db import models

from testrequests.choices import (
    DoctorSuggestion,
    Gender,
    RequestStatus,
    Role,
    TestResult,
)
from testrequests.workflows.guards import WorkflowWriteGuardMixin


# ============================================================
# Base
# ============================================================
class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# ============================================================
# User Roles
# ============================================================
class UserRole(TimeStampedModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="upstac_roles",
    )
    role = models.CharField(max_length=20, choices=Role.choices)

    class Meta:
        unique_together = ("user", "role")

    def __str__(self):
        return f"{self.user.get_username()} - {self.role}"


# ============================================================
# Test Request
# ============================================================
class TestRequest(WorkflowWriteGuardMixin, TimeStampedModel):
    """A COVID-19 test request moving through lab testing and consultation."""

    # not a pytest test class
    __test__ = False

    WORKFLOW_FIELDS = ("status", "assigned_tester_id", "assigned_doctor_id")

    name = models.CharField(max_length=255)
    age = models.PositiveSmallIntegerField(validators=[MaxValueValidator(150)])
    gender = models.CharField(max_length=10, choices=Gender.choices)
    email = models.EmailField()
    phone_number = models.CharField(max_length=20)
    address = models.CharField(max_length=255)
    pin_code = models.CharField(max_length=10)

    status = models.CharField(
        max_length=32,
        choices=RequestStatus.choices,
        default=RequestStatus.INITIATED,
        editable=False,
        db_index=True,
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="test_requests_created",
    )
    assigned_tester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        editable=False,
        related_name="lab_assignments",
    )
    assigned_doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        editable=False,
        related_name="consultation_assignments",
    )

    # Bumped on every committed transition; used for optimistic locking.
    version = models.PositiveIntegerField(default=0, editable=False)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="testreq_status_created_idx"),
        ]

    def __str__(self):
        return f"#{self.pk} {self.name} ({self.status})"


# ============================================================
# Lab Result
# ============================================================
class LabResult(models.Model):
    request = models.OneToOneField(
        TestRequest,
        on_delete=models.CASCADE,
        related_name="lab_result",
    )
    blood_pressure = models.CharField(max_length=20)
    heart_beat = models.CharField(max_length=20)
    temperature = models.CharField(max_length=20)
    oxygen_level = models.CharField(max_length=20)
    comments = models.TextField(blank=True)
    result = models.CharField(max_length=10, choices=TestResult.choices)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Lab result for #{self.request_id}: {self.result}"


# ============================================================
# Consultation
# ============================================================
class Consultation(models.Model):
    request = models.OneToOneField(
        TestRequest,
        on_delete=models.CASCADE,
        related_name="consultation",
    )
    suggestion = models.CharField(max_length=20, choices=DoctorSuggestion.choices)
    comments = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Consultation for #{self.request_id}: {self.suggestion}"


# ============================================================
# Test Request Flow (append-only transition log)
# ============================================================
class TestRequestFlow(models.Model):
    __test__ = False

    request = models.ForeignKey(
        TestRequest,
        on_delete=models.CASCADE,
        related_name="flows",
    )
    from_status = models.CharField(max_length=32)
    to_status = models.CharField(max_length=32)

    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="test_request_flows",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["request", "created_at"], name="testreqflow_request_idx"),
        ]

    def __str__(self):
        return (
            f"#{self.request_id} "
            f"{self.from_status} -> {self.to_status}"
        )
