"""
Case Store boundary.

Lookups that raise `NotFound` instead of `DoesNotExist`, and the
`atomic_operation` wrapper every state-changing service runs inside, so a
failed write never leaves a half-applied transition behind and database
errors surface as `PersistenceFailure`.
"""
import logging
from contextlib import contextmanager

from django.db import DatabaseError, transaction

from discipleship.errors import DiscipleshipError, NotFound, PersistenceFailure
from discipleship.models.case import DiscipleshipCase
from discipleship.models.case_event import CaseEvent
from discipleship.models.confraternizacao import Confraternizacao
from discipleship.models.module import DiscipleshipModule, ModuleProgress

logger = logging.getLogger(__name__)


@contextmanager
def atomic_operation(name: str):
    """Run a block in one transaction; wrap store errors as PersistenceFailure."""
    try:
        with transaction.atomic():
            yield
    except DiscipleshipError:
        raise
    except DatabaseError as exc:
        logger.exception("Store failure during %s", name)
        raise PersistenceFailure(f"{name} failed: {exc}") from exc


def get_case(case_id, congregation_id=None, for_update: bool = False) -> DiscipleshipCase:
    queryset = DiscipleshipCase.objects.select_related("member", "confraternizacao", "modulo_atual")
    if for_update:
        queryset = queryset.select_for_update(of=("self",))
    if congregation_id is not None:
        queryset = queryset.filter(congregation_id=congregation_id)
    try:
        return queryset.get(id=case_id)
    except DiscipleshipCase.DoesNotExist:
        raise NotFound(f"Case {case_id} not found", case_id=str(case_id))


def lock_case(case: DiscipleshipCase) -> DiscipleshipCase:
    """Re-fetch a case with a row lock. Must be called inside a transaction."""
    return get_case(case.id, for_update=True)


def get_module(module_id, congregation_id) -> DiscipleshipModule:
    try:
        return DiscipleshipModule.objects.get(id=module_id, congregation_id=congregation_id)
    except DiscipleshipModule.DoesNotExist:
        raise NotFound(f"Module {module_id} not found", module_id=str(module_id))


def get_progress(progress_id, congregation_id=None) -> ModuleProgress:
    queryset = ModuleProgress.objects.select_related("case", "module")
    if congregation_id is not None:
        queryset = queryset.filter(case__congregation_id=congregation_id)
    try:
        return queryset.get(id=progress_id)
    except ModuleProgress.DoesNotExist:
        raise NotFound(f"Progress {progress_id} not found", progress_id=str(progress_id))


def get_confraternizacao(event_id, congregation_id) -> Confraternizacao:
    try:
        return Confraternizacao.objects.get(id=event_id, congregation_id=congregation_id)
    except Confraternizacao.DoesNotExist:
        raise NotFound(f"Confraternização {event_id} not found", event_id=str(event_id))


def log_event(case, event_type: str, description: str, actor=None, payload: dict | None = None) -> CaseEvent:
    return CaseEvent.objects.create(
        case_id=case.id,
        event_type=event_type,
        actor=actor,
        payload=payload or {},
        description=description,
    )
