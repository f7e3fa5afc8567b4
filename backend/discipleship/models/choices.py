"""
Closed value sets for the discipleship domain.

Every string that crosses the API boundary (phase, status, outcome, channel,
module status) is one of these choices; unknown values are rejected by the
serializers before reaching the services.
"""
from django.db import models


class Phase(models.TextChoices):
    ACOLHIMENTO = "ACOLHIMENTO", "Acolhimento"
    DISCIPULADO = "DISCIPULADO", "Discipulado"
    POS_DISCIPULADO = "POS_DISCIPULADO", "Pós-discipulado"


class CaseStatus(models.TextChoices):
    PENDENTE_MATRICULA = "pendente_matricula", "Pendente"
    EM_DISCIPULADO = "em_discipulado", "Em discipulado"
    PAUSADO = "pausado", "Pausado"
    CONCLUIDO = "concluido", "Concluído"


class Criticality(models.TextChoices):
    BAIXA = "BAIXA", "Baixa"
    MEDIA = "MEDIA", "Média"
    ALTA = "ALTA", "Alta"
    CRITICA = "CRITICA", "Crítica"


class ContactOutcome(models.TextChoices):
    NO_ANSWER = "no_answer", "Não atendeu"
    WRONG_NUMBER = "wrong_number", "Número errado"
    REFUSED = "refused", "Recusou"
    SEM_RESPOSTA = "sem_resposta", "Sem resposta"
    CONTACTED = "contacted", "Contato realizado"
    SCHEDULED_VISIT = "scheduled_visit", "Visita agendada"


NEGATIVE_OUTCOMES = frozenset({
    ContactOutcome.NO_ANSWER.value,
    ContactOutcome.WRONG_NUMBER.value,
    ContactOutcome.REFUSED.value,
    ContactOutcome.SEM_RESPOSTA.value,
})


class ContactChannel(models.TextChoices):
    WHATSAPP = "whatsapp", "WhatsApp"
    LIGACAO = "ligacao", "Ligação"
    VISITA = "visita", "Visita"
    OUTRO = "outro", "Outro"


class ProgressStatus(models.TextChoices):
    NAO_INICIADO = "nao_iniciado", "Não iniciado"
    EM_ANDAMENTO = "em_andamento", "Em andamento"
    CONCLUIDO = "concluido", "Concluído"


class Turno(models.TextChoices):
    MANHA = "MANHA", "Manhã"
    TARDE = "TARDE", "Tarde"
    NOITE = "NOITE", "Noite"
    NAO_INFORMADO = "NAO_INFORMADO", "Não informado"


class Origin(models.TextChoices):
    MANHA = "MANHA", "Culto da Manhã"
    NOITE = "NOITE", "Culto da Noite"
    EVENTO = "EVENTO", "Evento"
    NAO_INFORMADO = "NAO_INFORMADO", "Não informado"


class ConfraternizacaoStatus(models.TextChoices):
    ATIVA = "ativa", "Ativa"
    FUTURA = "futura", "Futura"
    ENCERRADA = "encerrada", "Encerrada"
