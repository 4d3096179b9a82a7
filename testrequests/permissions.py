# testrequests/permissions.py
from __future__ import annotations

from typing import Set

from rest_framework.permissions import BasePermission

from testrequests.choices import Role
from testrequests.models import UserRole
from testrequests.workflows import has_role, normalize_role


# ------------------------------------------------------------------
# Role resolution
# ------------------------------------------------------------------
def get_user_roles(user) -> Set[str]:
    """
    Effective workflow roles for a user.

    Superusers carry ADMIN in addition to their stored roles. ADMIN
    does not grant TESTER or DOCTOR operations.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return set()

    roles = {
        normalize_role(r)
        for r in UserRole.objects.filter(user=user).values_list("role", flat=True)
    }
    if user.is_superuser:
        roles.add(Role.ADMIN.value)
    return roles


# ------------------------------------------------------------------
# Permission classes
# ------------------------------------------------------------------
class HasWorkflowRole(BasePermission):
    """
    Grants access to authenticated users holding any of ``allowed_roles``.
    """

    allowed_roles: tuple = ()
    message = "You do not have the role required for this endpoint."

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False

        roles = get_user_roles(user)
        return any(has_role(roles, r) for r in self.allowed_roles)


class IsTester(HasWorkflowRole):
    allowed_roles = (Role.TESTER,)
    message = "Only testers can access lab requests."


class IsDoctor(HasWorkflowRole):
    allowed_roles = (Role.DOCTOR,)
    message = "Only doctors can access consultations."


class IsWorkflowActor(HasWorkflowRole):
    allowed_roles = (Role.TESTER, Role.DOCTOR, Role.ADMIN)
