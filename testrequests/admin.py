# testrequests/admin.py

from django.contrib import admin

from .models import (
    Consultation,
    LabResult,
    TestRequest,
    TestRequestFlow,
    UserRole,
)


# =============================================================
# Test requests
# =============================================================

class LabResultInline(admin.StackedInline):
    model = LabResult
    extra = 0
    can_delete = False
    readonly_fields = [f.name for f in LabResult._meta.fields]

    def has_add_permission(self, request, obj=None):
        return False


class ConsultationInline(admin.StackedInline):
    model = Consultation
    extra = 0
    can_delete = False
    readonly_fields = [f.name for f in Consultation._meta.fields]

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(TestRequest)
class TestRequestAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "status",
        "assigned_tester",
        "assigned_doctor",
        "created_by",
        "created_at",
    )
    list_filter = ("status", "gender")
    search_fields = ("name", "email", "phone_number", "pin_code")
    ordering = ("-created_at",)
    readonly_fields = (
        "status",
        "assigned_tester",
        "assigned_doctor",
        "version",
        "created_at",
        "updated_at",
    )
    inlines = [LabResultInline, ConsultationInline]

    def get_readonly_fields(self, request, obj=None):
        # created_by is fixed once the request exists
        if obj is not None:
            return self.readonly_fields + ("created_by",)
        return self.readonly_fields


# =============================================================
# Workflow flow log (READ-ONLY)
# =============================================================

@admin.register(TestRequestFlow)
class TestRequestFlowAdmin(admin.ModelAdmin):
    list_display = (
        "request",
        "from_status",
        "to_status",
        "changed_by",
        "created_at",
    )
    list_filter = ("from_status", "to_status")
    search_fields = ("request__id", "changed_by__username")
    ordering = ("-created_at",)

    readonly_fields = [f.name for f in TestRequestFlow._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================
# Roles
# =============================================================

@admin.register(UserRole)
class UserRoleAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("user__username",)
