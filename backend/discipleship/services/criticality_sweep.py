"""
Criticality refresh sweep

days_to_confra shrinks as calendar days pass even when nobody touches a
case, so the materialized criticality goes stale. The sweep recomputes
(days_to_confra, criticality) for every open case through the same
`refresh_case_metrics` the recorder uses.

- refresh_case_criticality():         one case, row-locked
- refresh_congregation_criticality(): every non-concluded case of a congregation
- refresh_all_criticality():          django-q periodic task across congregations
"""
import logging
from datetime import datetime

from discipleship.models.case import DiscipleshipCase
from discipleship.models.choices import CaseStatus
from discipleship.services import store
from discipleship.services.criticality import refresh_case_metrics
from discipleship.utils import utcnow

logger = logging.getLogger(__name__)


def refresh_case_criticality(case: DiscipleshipCase, now: datetime | None = None) -> bool:
    """Returns True when the stored figures changed."""
    now = now or utcnow()
    with store.atomic_operation("refresh_case_criticality"):
        locked = store.lock_case(case)
        old_tier = locked.criticality
        old_days = locked.days_to_confra
        if not refresh_case_metrics(locked, now):
            return False

        # Leave updated_at alone: it measures operator contact, not sweeps
        DiscipleshipCase.objects.filter(id=locked.id).update(
            days_to_confra=locked.days_to_confra,
            criticality=locked.criticality,
        )
        store.log_event(
            locked,
            "criticality_refreshed",
            f"Criticality {old_tier} -> {locked.criticality} (days_to_confra {old_days} -> {locked.days_to_confra})",
            payload={
                "old_criticality": old_tier,
                "new_criticality": locked.criticality,
                "old_days_to_confra": old_days,
                "new_days_to_confra": locked.days_to_confra,
            },
        )
    return True


def refresh_congregation_criticality(congregation_id, now: datetime | None = None) -> dict:
    now = now or utcnow()
    cases = (
        DiscipleshipCase.objects
        .filter(congregation_id=congregation_id)
        .exclude(status=CaseStatus.CONCLUIDO)
        .only("id")
    )

    checked = changed = failed = 0
    for case in cases:
        checked += 1
        try:
            if refresh_case_criticality(case, now):
                changed += 1
        except Exception:
            failed += 1
            logger.exception("Failed to refresh criticality for case %s", case.id)

    logger.info(
        "Criticality sweep for congregation %s: %d checked, %d changed, %d failed",
        congregation_id, checked, changed, failed,
    )
    return {"checked": checked, "changed": changed, "failed": failed}


def refresh_all_criticality() -> str:
    """
    Runs on a django-q Schedule (see `manage.py setup_criticality_sweep`).
    Returns a short status string for the task log.
    """
    now = utcnow()
    congregation_ids = (
        DiscipleshipCase.objects
        .exclude(status=CaseStatus.CONCLUIDO)
        .order_by()
        .values_list("congregation_id", flat=True)
        .distinct()
    )

    totals = {"checked": 0, "changed": 0, "failed": 0}
    for congregation_id in congregation_ids:
        result = refresh_congregation_criticality(congregation_id, now)
        for key in totals:
            totals[key] += result[key]

    return (
        f"sweep complete: {totals['checked']} checked, "
        f"{totals['changed']} changed, {totals['failed']} failed"
    )
