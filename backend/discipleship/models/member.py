import uuid
from django.db import models


class Member(models.Model):
    """
    A person registered in a congregation. Only the fields the discipleship
    engine reads are modeled here; the full registration form lives elsewhere.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    congregation_id = models.UUIDField(db_index=True)

    nome_completo = models.CharField(max_length=200)
    telefone_whatsapp = models.CharField(max_length=30, null=True, blank=True)

    # Free text typed at registration ("Culto da manhã", "quarta", "MJ"...).
    # Normalized into an Origin bucket at read time.
    origem = models.CharField(max_length=120, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "pessoas"
        ordering = ["nome_completo"]

    def __str__(self):
        return self.nome_completo
