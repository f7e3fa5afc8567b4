"""
DRF serializers for API request/response validation.
Separates API contract from DB models; closed value sets are enforced here
with ChoiceFields so services never see an unknown outcome or status.
"""
from rest_framework import serializers

from discipleship.models import (
    CaseEvent, Confraternizacao, ContactAttempt, DiscipleshipCase,
    DiscipleshipModule, Member, ModuleProgress,
)
from discipleship.models.choices import (
    ContactChannel, ContactOutcome, ProgressStatus, Turno,
)


# ─── Member / Case Serializers ──────────────────────────────────────────────

class MemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = Member
        fields = ['id', 'congregation_id', 'nome_completo', 'telefone_whatsapp', 'origem', 'created_at']


class CaseCreateSerializer(serializers.Serializer):
    """Open a case for an existing member, or register the member inline."""
    congregation_id = serializers.UUIDField()
    member_id = serializers.UUIDField(required=False)
    nome_completo = serializers.CharField(required=False, max_length=200)
    telefone_whatsapp = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=30)
    origem = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=120)
    turno_origem = serializers.ChoiceField(choices=Turno.choices, required=False, allow_null=True)
    assigned_to = serializers.UUIDField(required=False, allow_null=True)
    confraternizacao_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    actor = serializers.UUIDField(required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs.get("member_id") and not attrs.get("nome_completo"):
            raise serializers.ValidationError("Provide member_id or nome_completo")
        return attrs


class CaseSerializer(serializers.ModelSerializer):
    member = MemberSerializer(read_only=True)

    class Meta:
        model = DiscipleshipCase
        fields = [
            'id', 'member', 'congregation_id', 'fase', 'status', 'criticality',
            'negative_contact_count', 'last_negative_contact_at', 'days_to_confra',
            'assigned_to', 'confraternizacao_id', 'confraternizacao_confirmada',
            'confraternizacao_confirmada_em', 'turno_origem', 'modulo_atual_id',
            'notes', 'created_at', 'updated_at',
        ]


class CaseSummarySerializer(serializers.ModelSerializer):
    """Lightweight card for queue and kanban views."""
    member_name = serializers.CharField(source='member.nome_completo', read_only=True)
    member_phone = serializers.CharField(source='member.telefone_whatsapp', read_only=True, allow_null=True)
    member_origem = serializers.CharField(source='member.origem', read_only=True, allow_null=True)

    class Meta:
        model = DiscipleshipCase
        fields = [
            'id', 'member_id', 'member_name', 'member_phone', 'member_origem',
            'fase', 'status', 'criticality', 'negative_contact_count', 'days_to_confra',
            'assigned_to', 'confraternizacao_confirmada', 'turno_origem',
            'modulo_atual_id', 'updated_at',
        ]


# ─── Contact Attempt Serializers ────────────────────────────────────────────

class ContactAttemptCreateSerializer(serializers.Serializer):
    """Payload to record an outreach attempt."""
    outcome = serializers.ChoiceField(choices=ContactOutcome.choices)
    channel = serializers.ChoiceField(choices=ContactChannel.choices)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    attempted_by = serializers.UUIDField(required=False, allow_null=True)


class ContactAttemptSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactAttempt
        fields = ['id', 'case_id', 'member_id', 'outcome', 'channel', 'notes', 'attempted_by', 'created_at']


# ─── Lifecycle Serializers ──────────────────────────────────────────────────

TRANSITION_ACTIONS = [
    'start_discipulado', 'pause', 'reactivate', 'conclude', 'advance',
    'move_module', 'reset_contacts', 'assign',
]


class TransitionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=TRANSITION_ACTIONS)
    module_id = serializers.UUIDField(required=False, allow_null=True)
    turno = serializers.ChoiceField(choices=Turno.choices, required=False, allow_null=True)
    assignee_id = serializers.UUIDField(required=False, allow_null=True)
    actor = serializers.UUIDField(required=False, allow_null=True)

    def validate(self, attrs):
        if attrs["action"] == "start_discipulado" and not attrs.get("module_id"):
            raise serializers.ValidationError({"module_id": "Required to start discipulado"})
        return attrs


class ConfraternizacaoConfirmSerializer(serializers.Serializer):
    event_id = serializers.UUIDField()
    actor = serializers.UUIDField(required=False, allow_null=True)


class ConfraternizacaoSerializer(serializers.ModelSerializer):
    class Meta:
        model = Confraternizacao
        fields = ['id', 'congregation_id', 'titulo', 'data_evento', 'status', 'created_at']


# ─── Module Serializers ─────────────────────────────────────────────────────

class ModuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = DiscipleshipModule
        fields = ['id', 'congregation_id', 'title', 'sort_order', 'is_active', 'created_at']


class ModuleProgressSerializer(serializers.ModelSerializer):
    module_title = serializers.CharField(source='module.title', read_only=True)

    class Meta:
        model = ModuleProgress
        fields = [
            'id', 'case_id', 'module_id', 'module_title', 'status', 'completed_at',
            'completed_by', 'notes', 'turno', 'created_at', 'updated_at',
        ]


class EnrollSerializer(serializers.Serializer):
    module_id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=ProgressStatus.choices, default=ProgressStatus.NAO_INICIADO)
    turno = serializers.ChoiceField(choices=Turno.choices, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    actor = serializers.UUIDField(required=False, allow_null=True)


class ProgressUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ProgressStatus.choices)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    actor = serializers.UUIDField(required=False, allow_null=True)


# ─── Event Serializers ──────────────────────────────────────────────────────

class CaseEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = CaseEvent
        fields = ['id', 'case_id', 'event_type', 'actor', 'payload', 'description', 'created_at']
