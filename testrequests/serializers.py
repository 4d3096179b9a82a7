from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Consultation, LabResult, TestRequest, TestRequestFlow


# ===============================================================
# Helpers
# ===============================================================

class UserSlimSerializer(serializers.ModelSerializer):
    class Meta:
        model = get_user_model()
        fields = ("id", "username", "email")
        read_only_fields = fields


# ===============================================================
# Result payloads
# ===============================================================

class LabResultSerializer(serializers.ModelSerializer):
    class Meta:
        model = LabResult
        fields = (
            "blood_pressure",
            "heart_beat",
            "temperature",
            "oxygen_level",
            "comments",
            "result",
            "updated_at",
        )
        read_only_fields = ("updated_at",)


class ConsultationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Consultation
        fields = (
            "suggestion",
            "comments",
            "updated_at",
        )
        read_only_fields = ("updated_at",)


class LabResultUpdateSerializer(LabResultSerializer):
    """Request body for a lab result submission (OpenAPI only)."""

    version = serializers.IntegerField(required=False, min_value=0)

    class Meta(LabResultSerializer.Meta):
        fields = LabResultSerializer.Meta.fields + ("version",)


class ConsultationUpdateSerializer(ConsultationSerializer):
    """Request body for a consultation submission (OpenAPI only)."""

    version = serializers.IntegerField(required=False, min_value=0)

    class Meta(ConsultationSerializer.Meta):
        fields = ConsultationSerializer.Meta.fields + ("version",)


class AssignSerializer(serializers.Serializer):
    version = serializers.IntegerField(required=False, min_value=0)


# ===============================================================
# Test request
# ===============================================================

class TestRequestSerializer(serializers.ModelSerializer):
    created_by = UserSlimSerializer(read_only=True)
    assigned_tester = UserSlimSerializer(read_only=True)
    assigned_doctor = UserSlimSerializer(read_only=True)
    lab_result = LabResultSerializer(read_only=True, allow_null=True)
    consultation = ConsultationSerializer(read_only=True, allow_null=True)

    class Meta:
        model = TestRequest
        fields = (
            "id",
            "name",
            "age",
            "gender",
            "email",
            "phone_number",
            "address",
            "pin_code",
            "status",
            "created_by",
            "assigned_tester",
            "assigned_doctor",
            "lab_result",
            "consultation",
            "version",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class TestRequestFlowSerializer(serializers.ModelSerializer):
    changed_by = serializers.CharField(source="changed_by.username", read_only=True, default=None)

    class Meta:
        model = TestRequestFlow
        fields = ("id", "from_status", "to_status", "changed_by", "created_at")
        read_only_fields = fields
