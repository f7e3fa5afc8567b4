import uuid
from django.db import models


class CaseEvent(models.Model):
    """
    Append-only event log for cases. Every state change made by the engine
    is recorded in the same transaction as the change itself.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    case = models.ForeignKey("DiscipleshipCase", on_delete=models.CASCADE, related_name="events")

    event_type = models.CharField(max_length=50, db_index=True)
    # Types: case_created, attempt_recorded, criticality_escalated, phase_changed,
    #        status_changed, module_enrolled, module_status_changed, module_moved,
    #        contacts_reset, case_assigned, confraternizacao_confirmed,
    #        confraternizacao_revoked, criticality_refreshed

    actor = models.UUIDField(null=True, blank=True)
    payload = models.JSONField(default=dict, blank=True)
    description = models.TextField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "discipleship_case_events"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["case", "-created_at"], name="idx_case_event_case_date"),
        ]

    def __str__(self):
        return f"{self.event_type} for case={self.case_id} at {self.created_at}"
