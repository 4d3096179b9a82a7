# testrequests/workflows/guards.py

from django.core.exceptions import PermissionDenied
from django.db import models


class WorkflowWriteGuardMixin(models.Model):
    """
    Prevent direct modification of workflow-controlled fields outside the
    update service.

    Any .save() on an existing row that changes one of WORKFLOW_FIELDS is
    rejected. The update service commits through queryset updates and never
    goes through save().

    Escape hatch:
      - pass _workflow_bypass=True to save(), OR
      - set instance._workflow_bypass = True
    Use sparingly (tests, data fixes, admin repair scripts).
    """

    WORKFLOW_FIELDS = ("status",)
    WORKFLOW_BYPASS_KWARG = "_workflow_bypass"

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        bypass = bool(
            kwargs.pop(self.WORKFLOW_BYPASS_KWARG, False)
            or getattr(self, "_workflow_bypass", False)
        )

        if not bypass and self.pk is not None and self.WORKFLOW_FIELDS:
            old = (
                self.__class__.objects.filter(pk=self.pk)
                .values(*self.WORKFLOW_FIELDS)
                .first()
            )
            if old is not None:
                changed = [
                    f for f in self.WORKFLOW_FIELDS
                    if old[f] != getattr(self, f, None)
                ]
                if changed:
                    raise PermissionDenied(
                        f"Direct modification of {', '.join(changed)} is forbidden. "
                        "Use the test request workflow operations."
                    )

        return super().save(*args, **kwargs)
