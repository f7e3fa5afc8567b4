import uuid
from django.db import models

from discipleship.models.choices import ContactChannel, ContactOutcome


class ContactAttempt(models.Model):
    """
    One outreach attempt against a case. Append-only: rows are never
    updated or deleted after creation (except by cascade when the case
    itself is deleted).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    case = models.ForeignKey("DiscipleshipCase", on_delete=models.CASCADE, related_name="contact_attempts")
    member = models.ForeignKey("Member", on_delete=models.CASCADE, related_name="contact_attempts")

    outcome = models.CharField(max_length=20, choices=ContactOutcome.choices)
    channel = models.CharField(max_length=20, choices=ContactChannel.choices)
    notes = models.TextField(null=True, blank=True)

    attempted_by = models.UUIDField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "contact_attempts"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["case", "-created_at"], name="idx_attempt_case_date"),
        ]

    def __str__(self):
        return f"{self.channel} ({self.outcome}) for case={self.case_id}"
