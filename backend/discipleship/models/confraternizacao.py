import uuid
from django.db import models

from discipleship.models.choices import ConfraternizacaoStatus


class Confraternizacao(models.Model):
    """
    A fellowship/integration event. Its date is the deadline anchor that
    drives `days_to_confra` on every case linked to it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    congregation_id = models.UUIDField(db_index=True)

    titulo = models.CharField(max_length=200, default="Confraternização")
    data_evento = models.DateField()

    # Optional: when blank the status is derived from data_evento
    status = models.CharField(
        max_length=20, choices=ConfraternizacaoStatus.choices, null=True, blank=True
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "confraternizacoes"
        ordering = ["data_evento"]
        indexes = [
            models.Index(fields=["congregation_id", "data_evento"], name="idx_confra_cong_date"),
        ]

    def __str__(self):
        return f"{self.titulo} ({self.data_evento})"
