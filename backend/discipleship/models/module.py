import uuid
from django.db import models

from discipleship.models.choices import ProgressStatus, Turno


class DiscipleshipModule(models.Model):
    """A unit of the discipleship curriculum, owned by a congregation."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    congregation_id = models.UUIDField(db_index=True)

    title = models.CharField(max_length=200)
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "discipleship_modules"
        ordering = ["sort_order", "title"]

    def __str__(self):
        return f"{self.sort_order}. {self.title}"


class ModuleProgress(models.Model):
    """
    Enrollment of a case in one module, with its completion bookkeeping.

    A case may be enrolled in several modules at once (and in different
    cohorts), but never twice in the same module.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    case = models.ForeignKey("DiscipleshipCase", on_delete=models.CASCADE, related_name="progress")
    module = models.ForeignKey(DiscipleshipModule, on_delete=models.CASCADE, related_name="progress")

    status = models.CharField(
        max_length=20, choices=ProgressStatus.choices, default=ProgressStatus.NAO_INICIADO
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.UUIDField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)

    turno = models.CharField(max_length=20, choices=Turno.choices, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "discipleship_progress"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=["case", "module"], name="uniq_progress_case_module"),
        ]

    def __str__(self):
        return f"{self.module_id} ({self.status}) for case={self.case_id}"
