# testrequests/choices.py
from django.db import models


class RequestStatus(models.TextChoices):
    INITIATED = "INITIATED", "Initiated"
    LAB_TEST_IN_PROGRESS = "LAB_TEST_IN_PROGRESS", "Lab test in progress"
    LAB_TEST_COMPLETED = "LAB_TEST_COMPLETED", "Lab test completed"
    DIAGNOSIS_IN_PROCESS = "DIAGNOSIS_IN_PROCESS", "Diagnosis in process"
    COMPLETED = "COMPLETED", "Completed"


class Role(models.TextChoices):
    TESTER = "TESTER", "Tester"
    DOCTOR = "DOCTOR", "Doctor"
    ADMIN = "ADMIN", "Admin"


class Gender(models.TextChoices):
    MALE = "MALE", "Male"
    FEMALE = "FEMALE", "Female"
    OTHER = "OTHER", "Other"


class TestResult(models.TextChoices):
    POSITIVE = "POSITIVE", "Positive"
    NEGATIVE = "NEGATIVE", "Negative"

    # keep pytest from collecting this enum
    __test__ = False


class DoctorSuggestion(models.TextChoices):
    NO_ISSUES = "NO_ISSUES", "No issues"
    HOME_QUARANTINE = "HOME_QUARANTINE", "Home quarantine"
    ADMIT = "ADMIT", "Admit"
