"""
Criticality Scorer

Maps a case's contact history and deadline proximity into one of four
urgency tiers. Rules, first match wins:

  1. deadline today or passed   -> ALTA, or CRITICA with >= 2 negatives
  2. >= 3 negative contacts     -> CRITICA
  3. 2 negatives or <= 3 days   -> ALTA
  4. 1 negative or <= 7 days    -> MEDIA
  5. otherwise                  -> BAIXA

The numeric thresholds come from settings so they can be tuned without a
code change. `refresh_case_metrics` is the only place that writes the
materialized (days_to_confra, criticality) pair back onto a case.
"""
import logging
from datetime import datetime

from django.conf import settings

from discipleship.models.choices import Criticality, NEGATIVE_OUTCOMES, ContactOutcome
from discipleship.services.confraternizacao import days_until

logger = logging.getLogger(__name__)

CRITICALITY_RANK = {
    Criticality.BAIXA.value: 1,
    Criticality.MEDIA.value: 2,
    Criticality.ALTA.value: 3,
    Criticality.CRITICA.value: 4,
}


def _threshold(name: str, default: int) -> int:
    return int(getattr(settings, name, default))


def score(negative_contact_count: int, days_to_confra: int | None) -> Criticality:
    """Pure scorer: (negative contacts, days to confra) -> criticality tier."""
    critical_negatives = _threshold("CRITICALITY_CRITICAL_NEGATIVES", 3)
    high_negatives = _threshold("CRITICALITY_HIGH_NEGATIVES", 2)
    high_days = _threshold("CRITICALITY_HIGH_DAYS", 3)
    medium_days = _threshold("CRITICALITY_MEDIUM_DAYS", 7)

    has_deadline = days_to_confra is not None

    if has_deadline and days_to_confra <= 0:
        if negative_contact_count >= high_negatives:
            return Criticality.CRITICA
        return Criticality.ALTA

    if negative_contact_count >= critical_negatives:
        return Criticality.CRITICA

    if negative_contact_count >= high_negatives or (has_deadline and days_to_confra <= high_days):
        return Criticality.ALTA

    if negative_contact_count >= 1 or (has_deadline and days_to_confra <= medium_days):
        return Criticality.MEDIA

    return Criticality.BAIXA


def criticality_rank(tier: str | None) -> int:
    """Total order BAIXA < MEDIA < ALTA < CRITICA; unknown values rank as BAIXA."""
    lowest = CRITICALITY_RANK[Criticality.BAIXA.value]
    if tier is None:
        return lowest
    return CRITICALITY_RANK.get(str(tier), lowest)


def is_negative_outcome(outcome: str) -> bool:
    outcome = str(outcome)
    if outcome not in ContactOutcome.values:
        raise ValueError(f"Unknown contact outcome: {outcome!r}")
    return outcome in NEGATIVE_OUTCOMES


def refresh_case_metrics(case, now: datetime) -> bool:
    """
    Recompute days_to_confra and criticality on an in-memory case.

    Does not save. Returns True when either field changed so callers can
    decide whether a write is needed.
    """
    event = case.confraternizacao
    new_days = days_until(event.data_evento if event else None, now.date())
    new_tier = score(case.negative_contact_count, new_days)

    changed = new_days != case.days_to_confra or new_tier != case.criticality
    case.days_to_confra = new_days
    case.criticality = new_tier
    return changed
