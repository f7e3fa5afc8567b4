import uuid
from django.db import models

from discipleship.models.choices import CaseStatus, Criticality, Phase, Turno


class DiscipleshipCase(models.Model):
    """
    A Case follows one person from the acolhimento funnel through the
    discipleship modules. This is the central entity: contact attempts,
    module progress and the audit log all hang off a case.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    member = models.ForeignKey("Member", on_delete=models.CASCADE, related_name="cases")
    congregation_id = models.UUIDField(db_index=True)

    fase = models.CharField(max_length=20, choices=Phase.choices, default=Phase.ACOLHIMENTO)
    status = models.CharField(
        max_length=30, choices=CaseStatus.choices, default=CaseStatus.PENDENTE_MATRICULA
    )

    # Materialized from the scorer; only the recorder/refresh path writes these
    criticality = models.CharField(max_length=10, choices=Criticality.choices, default=Criticality.BAIXA)
    negative_contact_count = models.PositiveIntegerField(default=0)
    last_negative_contact_at = models.DateTimeField(null=True, blank=True)
    days_to_confra = models.IntegerField(null=True, blank=True)

    assigned_to = models.UUIDField(null=True, blank=True)

    confraternizacao = models.ForeignKey(
        "Confraternizacao", on_delete=models.SET_NULL, null=True, blank=True, related_name="cases"
    )
    confraternizacao_confirmada = models.BooleanField(default=False)
    confraternizacao_confirmada_em = models.DateTimeField(null=True, blank=True)

    turno_origem = models.CharField(max_length=20, choices=Turno.choices, null=True, blank=True)
    modulo_atual = models.ForeignKey(
        "DiscipleshipModule", on_delete=models.SET_NULL, null=True, blank=True, related_name="current_cases"
    )

    notes = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "discipleship_cases"
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["congregation_id", "fase", "status"], name="idx_case_cong_phase_status"),
        ]

    def __str__(self):
        return f"case={self.id} ({self.fase}/{self.status}, {self.criticality})"
