"""
Module Enrollment Tracker

A case is enrolled in discipleship modules through ModuleProgress rows,
at most one per (case, module). Completion metadata always follows the
status: entering "concluido" stamps completed_at/completed_by, leaving it
clears both.

The per-case aggregate lives in services.progress.
"""
import logging
from datetime import datetime

from django.db import IntegrityError, transaction

from discipleship.errors import DuplicateEnrollment, InvalidValue
from discipleship.models.choices import ProgressStatus, Turno
from discipleship.models.module import ModuleProgress
from discipleship.services import store
from discipleship.services.lifecycle import revert_concluded_case
from discipleship.utils import utcnow

logger = logging.getLogger(__name__)


def _validate_status(status: str) -> str:
    if status not in ProgressStatus.values:
        raise InvalidValue(f"Unknown module status: {status!r}", field="status")
    return str(status)


def _apply_completion(progress: ModuleProgress, status: str, actor, now: datetime) -> None:
    progress.status = status
    if status == ProgressStatus.CONCLUIDO:
        progress.completed_at = now
        progress.completed_by = actor
    else:
        progress.completed_at = None
        progress.completed_by = None


def enroll(
    case,
    module_id,
    initial_status: str = ProgressStatus.NAO_INICIADO,
    actor=None,
    turno: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> ModuleProgress:
    """
    Enroll a case in a module.

    Raises DuplicateEnrollment when the pair already exists; the existing
    row is left untouched. Enrolling unfinished work into a concluded case
    reopens it (em_discipulado).
    """
    initial_status = _validate_status(initial_status)
    if turno is not None and turno not in Turno.values:
        raise InvalidValue(f"Unknown turno: {turno!r}", field="turno")
    now = now or utcnow()

    with store.atomic_operation("enroll"):
        locked = store.lock_case(case)
        module = store.get_module(module_id, locked.congregation_id)

        if ModuleProgress.objects.filter(case_id=locked.id, module_id=module.id).exists():
            raise DuplicateEnrollment(
                f"Case already enrolled in module '{module.title}'",
                case_id=str(locked.id),
                module_id=str(module.id),
            )

        progress = ModuleProgress(case=locked, module=module, notes=notes, turno=turno)
        _apply_completion(progress, initial_status, actor, now)
        try:
            with transaction.atomic():
                progress.save()
        except IntegrityError:
            raise DuplicateEnrollment(
                f"Case already enrolled in module '{module.title}'",
                case_id=str(locked.id),
                module_id=str(module.id),
            )

        store.log_event(
            locked,
            "module_enrolled",
            f"Enrolled in {module.title} ({initial_status})",
            actor=actor,
            payload={"module_id": str(module.id), "status": initial_status, "turno": turno},
        )

        if initial_status != ProgressStatus.CONCLUIDO:
            revert_concluded_case(locked, actor=actor, reason="module_enrolled")

    logger.info("Enrolled case %s in module %s (%s)", locked.id, module.id, initial_status)
    return progress


def set_module_status(progress, new_status: str, actor=None, notes: str | None = None,
                      now: datetime | None = None) -> ModuleProgress:
    """
    Change a module's status, keeping completion metadata consistent.

    Moving a module out of "concluido" while its case is concluded
    auto-reverts the case to em_discipulado in the same transaction.
    """
    new_status = _validate_status(new_status)
    now = now or utcnow()

    with store.atomic_operation("set_module_status"):
        locked_case = store.lock_case(progress.case)
        row = ModuleProgress.objects.select_for_update().get(id=progress.id)
        old_status = row.status

        if old_status != new_status:
            _apply_completion(row, new_status, actor, now)
        if notes is not None:
            row.notes = notes or None
        row.save()

        if old_status != new_status:
            store.log_event(
                locked_case,
                "module_status_changed",
                f"Module {row.module_id}: {old_status} -> {new_status}",
                actor=actor,
                payload={
                    "progress_id": str(row.id),
                    "module_id": str(row.module_id),
                    "old_status": old_status,
                    "new_status": new_status,
                },
            )

        if new_status != ProgressStatus.CONCLUIDO:
            revert_concluded_case(locked_case, actor=actor, reason="module_reopened")

    logger.info("Progress %s status %s -> %s", row.id, old_status, new_status)
    return row
