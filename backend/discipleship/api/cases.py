"""
Case API — open, inspect and delete cases; record contact attempts;
drive lifecycle transitions.

Lifecycle actions (POST cases/<id>/transitions):
  start_discipulado, pause, reactivate, conclude, advance,
  move_module, reset_contacts, assign
"""
import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from discipleship.api.responses import congregation_scope, error_response, int_param
from discipleship.errors import DiscipleshipError, NotFound
from discipleship.models import CaseEvent, ContactAttempt, DiscipleshipCase, Member, ModuleProgress
from discipleship.serializers import (
    CaseCreateSerializer, CaseEventSerializer, CaseSerializer, CaseSummarySerializer,
    ConfraternizacaoConfirmSerializer, ContactAttemptCreateSerializer,
    ContactAttemptSerializer, ModuleProgressSerializer, TransitionSerializer,
)
from discipleship.services import lifecycle, store
from discipleship.services.contact_recorder import record_attempt
from discipleship.services.progress import summarize_progress

logger = logging.getLogger(__name__)


class CaseListCreateView(APIView):
    """List a congregation's cases and open new ones."""

    def get(self, request):
        congregation_id, error = congregation_scope(request)
        if error:
            return error

        queryset = DiscipleshipCase.objects.filter(congregation_id=congregation_id).select_related("member")

        phase = request.query_params.get("phase")
        if phase:
            queryset = queryset.filter(fase=phase)
        case_status = request.query_params.get("status")
        if case_status:
            queryset = queryset.filter(status=case_status)
        criticality = request.query_params.get("criticality")
        if criticality:
            queryset = queryset.filter(criticality=criticality)

        limit, error = int_param(request, "limit", 50, maximum=500)
        if error:
            return error
        offset, error = int_param(request, "offset", 0)
        if error:
            return error
        queryset = queryset.order_by("-updated_at")[offset:offset + limit]

        return Response(CaseSummarySerializer(queryset, many=True).data)

    def post(self, request):
        serializer = CaseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        congregation_id = data["congregation_id"]

        try:
            if data.get("member_id"):
                try:
                    member = Member.objects.get(id=data["member_id"], congregation_id=congregation_id)
                except Member.DoesNotExist:
                    raise NotFound(f"Member {data['member_id']} not found", member_id=str(data["member_id"]))
            else:
                member = Member.objects.create(
                    congregation_id=congregation_id,
                    nome_completo=data["nome_completo"],
                    telefone_whatsapp=data.get("telefone_whatsapp") or None,
                    origem=data.get("origem") or None,
                )

            event = None
            if data.get("confraternizacao_id"):
                event = store.get_confraternizacao(data["confraternizacao_id"], congregation_id)

            case = lifecycle.open_case(
                member,
                turno_origem=data.get("turno_origem"),
                assigned_to=data.get("assigned_to"),
                confraternizacao=event,
                notes=data.get("notes") or None,
                actor=data.get("actor"),
            )
        except DiscipleshipError as exc:
            return error_response(exc)

        return Response(CaseSerializer(case).data, status=status.HTTP_201_CREATED)


class CaseDetailView(APIView):
    """Full case detail: progress aggregate, modules, attempts and timeline."""

    def get(self, request, case_id):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        try:
            case = store.get_case(case_id, congregation_id)
        except NotFound as exc:
            return error_response(exc)

        progress = ModuleProgress.objects.filter(case_id=case.id).select_related("module").order_by(
            "module__sort_order", "module__title"
        )
        attempts = ContactAttempt.objects.filter(case_id=case.id).order_by("-created_at")
        events = CaseEvent.objects.filter(case_id=case.id).order_by("-created_at")

        data = {
            "case": CaseSerializer(case).data,
            "progress": ModuleProgressSerializer(progress, many=True).data,
            "summary": summarize_progress(progress).to_dict(),
            "contact_attempts": ContactAttemptSerializer(attempts, many=True).data,
            "events": CaseEventSerializer(events, many=True).data,
        }
        return Response(data)

    def delete(self, request, case_id):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        try:
            case = store.get_case(case_id, congregation_id)
            lifecycle.delete_case(case)
        except DiscipleshipError as exc:
            return error_response(exc)
        return Response({"detail": "Deleted", "case_id": str(case_id)})


class ContactAttemptView(APIView):
    """Record an outreach attempt; the response says whether it escalated the case."""

    def get(self, request, case_id):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        try:
            case = store.get_case(case_id, congregation_id)
        except NotFound as exc:
            return error_response(exc)
        attempts = ContactAttempt.objects.filter(case_id=case.id).order_by("-created_at")
        return Response(ContactAttemptSerializer(attempts, many=True).data)

    def post(self, request, case_id):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        serializer = ContactAttemptCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            case = store.get_case(case_id, congregation_id)
            result = record_attempt(
                case,
                outcome=data["outcome"],
                channel=data["channel"],
                notes=data.get("notes"),
                actor=data.get("attempted_by"),
            )
        except DiscipleshipError as exc:
            return error_response(exc)

        return Response(
            {
                "message": "Criticality escalated" if result.escalated else "Attempt recorded",
                "notification": result.notification,
                "previous_criticality": result.previous_criticality,
                "attempt": ContactAttemptSerializer(result.attempt).data,
                "case": CaseSerializer(result.case).data,
            },
            status=status.HTTP_201_CREATED,
        )


class CaseTransitionView(APIView):
    """Apply one lifecycle action to a case."""

    def post(self, request, case_id):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        serializer = TransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        action = data["action"]
        actor = data.get("actor")

        try:
            case = store.get_case(case_id, congregation_id)
            if action == "start_discipulado":
                case = lifecycle.start_discipulado(case, data["module_id"], turno=data.get("turno"), actor=actor)
            elif action == "pause":
                case = lifecycle.pause(case, actor=actor)
            elif action == "reactivate":
                case = lifecycle.reactivate(case, actor=actor)
            elif action == "conclude":
                case = lifecycle.conclude(case, actor=actor)
            elif action == "advance":
                case = lifecycle.advance_to_pos_discipulado(case, actor=actor)
            elif action == "move_module":
                case = lifecycle.move_to_module(case, data.get("module_id"), actor=actor)
            elif action == "reset_contacts":
                case = lifecycle.reset_negative_contacts(case, actor=actor)
            elif action == "assign":
                case = lifecycle.assign(case, data.get("assignee_id"), actor=actor)
        except DiscipleshipError as exc:
            logger.info("Transition %s rejected for case %s: %s", action, case_id, exc.code)
            return error_response(exc)

        return Response(CaseSerializer(case).data)


class CaseConfraternizacaoView(APIView):
    """Confirm (POST) or revoke (DELETE) a case's confraternização attendance."""

    def post(self, request, case_id):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        serializer = ConfraternizacaoConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            case = store.get_case(case_id, congregation_id)
            case = lifecycle.confirm_confraternizacao(case, data["event_id"], actor=data.get("actor"))
        except DiscipleshipError as exc:
            return error_response(exc)
        return Response(CaseSerializer(case).data)

    def delete(self, request, case_id):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        try:
            case = store.get_case(case_id, congregation_id)
            case = lifecycle.revoke_confraternizacao(case)
        except DiscipleshipError as exc:
            return error_response(exc)
        return Response(CaseSerializer(case).data)
