"""
Case Lifecycle State Machine

Phases:   ACOLHIMENTO -> DISCIPULADO -> POS_DISCIPULADO
Statuses: pendente_matricula, em_discipulado <-> pausado, concluido

Transitions:
  start_discipulado   ACOLHIMENTO only; assigns the starting module
  pause               em_discipulado -> pausado
  reactivate          pausado -> em_discipulado
  conclude            requires every enrolled module done (and at least one)
  advance             DISCIPULADO + concluido -> POS_DISCIPULADO

Each transition runs in one transaction against a row-locked copy of the
case: either the status and its dependent fields all change, or nothing
does. Invalid requests raise a typed error and are never retried.
"""
import logging
from datetime import datetime

from discipleship.errors import IncompleteModules, InvalidTransition, InvalidValue
from discipleship.models.case import DiscipleshipCase
from discipleship.models.choices import CaseStatus, Phase, Turno
from discipleship.services import store
from discipleship.services.criticality import refresh_case_metrics
from discipleship.services.progress import progress_summary
from discipleship.utils import utcnow

logger = logging.getLogger(__name__)


def _set_status(case: DiscipleshipCase, new_status: str, actor, reason: str) -> None:
    old_status = case.status
    case.status = new_status
    case.save(update_fields=["status", "updated_at"])
    store.log_event(
        case,
        "status_changed",
        f"Status changed: {old_status} -> {new_status}",
        actor=actor,
        payload={"old_status": old_status, "new_status": new_status, "reason": reason},
    )
    logger.info("Case %s status %s -> %s (%s)", case.id, old_status, new_status, reason)


def start_discipulado(case: DiscipleshipCase, first_module_id, turno: str | None = None,
                      actor=None) -> DiscipleshipCase:
    if turno is not None and turno not in Turno.values:
        raise InvalidValue(f"Unknown turno: {turno!r}", field="turno")

    with store.atomic_operation("start_discipulado"):
        locked = store.lock_case(case)
        if locked.fase != Phase.ACOLHIMENTO:
            raise InvalidTransition(
                f"Case is already in {locked.fase}; discipulado can only start from ACOLHIMENTO",
                current_phase=locked.fase,
            )
        module = store.get_module(first_module_id, locked.congregation_id)

        locked.fase = Phase.DISCIPULADO
        locked.modulo_atual = module
        update_fields = ["fase", "modulo_atual", "updated_at"]
        if locked.status == CaseStatus.PENDENTE_MATRICULA:
            locked.status = CaseStatus.EM_DISCIPULADO
            update_fields.append("status")
        if turno is not None:
            locked.turno_origem = turno
            update_fields.append("turno_origem")
        locked.save(update_fields=update_fields)

        store.log_event(
            locked,
            "phase_changed",
            f"Phase changed: {Phase.ACOLHIMENTO} -> {Phase.DISCIPULADO} (module {module.title})",
            actor=actor,
            payload={
                "old_phase": Phase.ACOLHIMENTO,
                "new_phase": Phase.DISCIPULADO,
                "module_id": str(module.id),
                "turno": turno,
            },
        )

    logger.info("Case %s started discipulado at module %s", locked.id, module.id)
    return locked


def pause(case: DiscipleshipCase, actor=None) -> DiscipleshipCase:
    with store.atomic_operation("pause"):
        locked = store.lock_case(case)
        if locked.status != CaseStatus.EM_DISCIPULADO:
            raise InvalidTransition(
                f"Only cases em_discipulado can be paused (current: {locked.status})",
                current_status=locked.status,
            )
        _set_status(locked, CaseStatus.PAUSADO, actor, "pause")
    return locked


def reactivate(case: DiscipleshipCase, actor=None) -> DiscipleshipCase:
    with store.atomic_operation("reactivate"):
        locked = store.lock_case(case)
        if locked.status != CaseStatus.PAUSADO:
            raise InvalidTransition(
                f"Only paused cases can be reactivated (current: {locked.status})",
                current_status=locked.status,
            )
        _set_status(locked, CaseStatus.EM_DISCIPULADO, actor, "reactivate")
    return locked


def conclude(case: DiscipleshipCase, actor=None) -> DiscipleshipCase:
    with store.atomic_operation("conclude"):
        locked = store.lock_case(case)
        if locked.status == CaseStatus.CONCLUIDO:
            raise InvalidTransition("Case is already concluded", current_status=locked.status)

        summary = progress_summary(locked)
        if not summary.is_complete:
            raise IncompleteModules(summary.done_modules, summary.total_modules)

        _set_status(locked, CaseStatus.CONCLUIDO, actor, "conclude")
    return locked


def advance_to_pos_discipulado(case: DiscipleshipCase, actor=None) -> DiscipleshipCase:
    with store.atomic_operation("advance_to_pos_discipulado"):
        locked = store.lock_case(case)
        if locked.fase != Phase.DISCIPULADO or locked.status != CaseStatus.CONCLUIDO:
            raise InvalidTransition(
                "Only concluded cases in DISCIPULADO can move to POS_DISCIPULADO",
                current_phase=locked.fase,
                current_status=locked.status,
            )
        locked.fase = Phase.POS_DISCIPULADO
        locked.save(update_fields=["fase", "updated_at"])
        store.log_event(
            locked,
            "phase_changed",
            f"Phase changed: {Phase.DISCIPULADO} -> {Phase.POS_DISCIPULADO}",
            actor=actor,
            payload={"old_phase": Phase.DISCIPULADO, "new_phase": Phase.POS_DISCIPULADO},
        )
    logger.info("Case %s advanced to pos-discipulado", locked.id)
    return locked


def revert_concluded_case(locked: DiscipleshipCase, actor=None, reason: str = "module_reopened") -> bool:
    """
    Reopen a concluded case whose modules are no longer all done.

    Called by the enrollment tracker inside its own transaction, on a case
    it has already locked. Returns True when the case was reverted.
    """
    if locked.status != CaseStatus.CONCLUIDO:
        return False
    _set_status(locked, CaseStatus.EM_DISCIPULADO, actor, reason)
    return True


def move_to_module(case: DiscipleshipCase, module_id, actor=None) -> DiscipleshipCase:
    """Re-point the case's current module (None clears it). DISCIPULADO only."""
    with store.atomic_operation("move_to_module"):
        locked = store.lock_case(case)
        if locked.fase != Phase.DISCIPULADO:
            raise InvalidTransition(
                "Current module can only be set during DISCIPULADO",
                current_phase=locked.fase,
            )
        module = store.get_module(module_id, locked.congregation_id) if module_id else None
        old_module_id = locked.modulo_atual_id
        locked.modulo_atual = module
        locked.save(update_fields=["modulo_atual", "updated_at"])
        store.log_event(
            locked,
            "module_moved",
            f"Current module: {old_module_id} -> {module.id if module else None}",
            actor=actor,
            payload={
                "old_module_id": str(old_module_id) if old_module_id else None,
                "new_module_id": str(module.id) if module else None,
            },
        )
    return locked


def confirm_confraternizacao(case: DiscipleshipCase, event_id, actor=None,
                             now: datetime | None = None) -> DiscipleshipCase:
    """
    Link the case to an event and mark it confirmed. Phase and status are
    untouched; days_to_confra and criticality follow the new link.
    Confirmed cases drop out of the acolhimento queue.
    """
    now = now or utcnow()
    with store.atomic_operation("confirm_confraternizacao"):
        locked = store.lock_case(case)
        event = store.get_confraternizacao(event_id, locked.congregation_id)
        locked.confraternizacao = event
        locked.confraternizacao_confirmada = True
        locked.confraternizacao_confirmada_em = now
        refresh_case_metrics(locked, now)
        locked.save(update_fields=[
            "confraternizacao", "confraternizacao_confirmada",
            "confraternizacao_confirmada_em", "days_to_confra", "criticality", "updated_at",
        ])
        store.log_event(
            locked,
            "confraternizacao_confirmed",
            f"Confirmed for {event.titulo} ({event.data_evento})",
            actor=actor,
            payload={"event_id": str(event.id)},
        )
    logger.info("Case %s confirmed for confraternização %s", locked.id, event.id)
    return locked


def revoke_confraternizacao(case: DiscipleshipCase, actor=None) -> DiscipleshipCase:
    with store.atomic_operation("revoke_confraternizacao"):
        locked = store.lock_case(case)
        if not locked.confraternizacao_confirmada:
            raise InvalidTransition("Case is not confirmed for the confraternização")
        locked.confraternizacao_confirmada = False
        locked.confraternizacao_confirmada_em = None
        locked.save(update_fields=[
            "confraternizacao_confirmada", "confraternizacao_confirmada_em", "updated_at",
        ])
        store.log_event(
            locked,
            "confraternizacao_revoked",
            "Confraternização confirmation revoked",
            actor=actor,
            payload={"event_id": str(locked.confraternizacao_id) if locked.confraternizacao_id else None},
        )
    logger.info("Case %s confraternização confirmation revoked", locked.id)
    return locked


def reset_negative_contacts(case: DiscipleshipCase, actor=None,
                            now: datetime | None = None) -> DiscipleshipCase:
    """The only path that lowers negative_contact_count."""
    now = now or utcnow()
    with store.atomic_operation("reset_negative_contacts"):
        locked = store.lock_case(case)
        old_count = locked.negative_contact_count
        old_tier = locked.criticality
        locked.negative_contact_count = 0
        locked.last_negative_contact_at = None
        refresh_case_metrics(locked, now)
        locked.save(update_fields=[
            "negative_contact_count", "last_negative_contact_at",
            "days_to_confra", "criticality", "updated_at",
        ])
        store.log_event(
            locked,
            "contacts_reset",
            f"Negative contacts reset ({old_count} -> 0), criticality {old_tier} -> {locked.criticality}",
            actor=actor,
            payload={"old_count": old_count, "old_criticality": old_tier, "new_criticality": locked.criticality},
        )
    return locked


def assign(case: DiscipleshipCase, assignee_id, actor=None) -> DiscipleshipCase:
    with store.atomic_operation("assign"):
        locked = store.lock_case(case)
        old_assignee = locked.assigned_to
        locked.assigned_to = assignee_id
        locked.save(update_fields=["assigned_to", "updated_at"])
        store.log_event(
            locked,
            "case_assigned",
            f"Assigned to {assignee_id or 'nobody'}",
            actor=actor,
            payload={
                "old_assignee": str(old_assignee) if old_assignee else None,
                "new_assignee": str(assignee_id) if assignee_id else None,
            },
        )
    return locked


def open_case(member, turno_origem: str | None = None, assigned_to=None, confraternizacao=None,
              notes: str | None = None, actor=None, now: datetime | None = None) -> DiscipleshipCase:
    """A person enters the acolhimento funnel."""
    if turno_origem is not None and turno_origem not in Turno.values:
        raise InvalidValue(f"Unknown turno: {turno_origem!r}", field="turno_origem")
    now = now or utcnow()

    with store.atomic_operation("open_case"):
        case = DiscipleshipCase(
            member=member,
            congregation_id=member.congregation_id,
            turno_origem=turno_origem,
            assigned_to=assigned_to,
            confraternizacao=confraternizacao,
            notes=notes,
        )
        refresh_case_metrics(case, now)
        case.save()
        store.log_event(
            case,
            "case_created",
            f"Case opened for {member.nome_completo}",
            actor=actor,
            payload={"member_id": str(member.id)},
        )
    logger.info("Opened case %s for member %s", case.id, member.id)
    return case


def delete_case(case: DiscipleshipCase) -> None:
    """Explicit deletion; attempts, progress and events go with the case."""
    with store.atomic_operation("delete_case"):
        case_id = case.id
        case.delete()
    logger.info("Deleted case %s", case_id)
