"""
Contact Attempt Recorder

When an operator logs an outreach attempt:
1. Append an immutable ContactAttempt row
2. Negative outcome (no_answer, wrong_number, refused, sem_resposta):
   bump negative_contact_count and stamp last_negative_contact_at
3. Recompute days_to_confra from the linked event
4. Recompute criticality and persist the tuple on the case
5. Return the refreshed case plus the previous tier, so the caller can tell
   an escalation apart from a plain "recorded" acknowledgment

Steps 1-4 run in a single transaction on a row-locked case. Nothing here
sends messages; dispatch belongs to the caller.
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from discipleship.errors import InvalidValue
from discipleship.models.case import DiscipleshipCase
from discipleship.models.choices import ContactChannel, ContactOutcome
from discipleship.models.contact_attempt import ContactAttempt
from discipleship.services import store
from discipleship.services.criticality import criticality_rank, is_negative_outcome, refresh_case_metrics
from discipleship.utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class AttemptResult:
    case: DiscipleshipCase
    attempt: ContactAttempt
    previous_criticality: str

    @property
    def escalated(self) -> bool:
        return criticality_rank(self.case.criticality) > criticality_rank(self.previous_criticality)

    @property
    def notification(self) -> str:
        return "escalation" if self.escalated else "recorded"


def record_attempt(
    case: DiscipleshipCase,
    outcome: str,
    channel: str,
    notes: str | None = None,
    actor=None,
    now: datetime | None = None,
) -> AttemptResult:
    if outcome not in ContactOutcome.values:
        raise InvalidValue(f"Unknown contact outcome: {outcome!r}", field="outcome")
    if channel not in ContactChannel.values:
        raise InvalidValue(f"Unknown contact channel: {channel!r}", field="channel")
    now = now or utcnow()
    negative = is_negative_outcome(outcome)

    with store.atomic_operation("record_attempt"):
        locked = store.lock_case(case)
        previous = locked.criticality

        attempt = ContactAttempt.objects.create(
            case_id=locked.id,
            member_id=locked.member_id,
            outcome=outcome,
            channel=channel,
            notes=notes or None,
            attempted_by=actor,
        )

        if negative:
            locked.negative_contact_count += 1
            locked.last_negative_contact_at = now

        refresh_case_metrics(locked, now)
        locked.save(update_fields=[
            "negative_contact_count", "last_negative_contact_at",
            "days_to_confra", "criticality", "updated_at",
        ])

        store.log_event(
            locked,
            "attempt_recorded",
            f"{channel} attempt: {outcome}" + (" (negative)" if negative else ""),
            actor=actor,
            payload={
                "attempt_id": str(attempt.id),
                "outcome": outcome,
                "channel": channel,
                "negative_contact_count": locked.negative_contact_count,
                "days_to_confra": locked.days_to_confra,
            },
        )

        result = AttemptResult(case=locked, attempt=attempt, previous_criticality=previous)
        if result.escalated:
            store.log_event(
                locked,
                "criticality_escalated",
                f"Criticality escalated: {previous} -> {locked.criticality}",
                actor=actor,
                payload={"old_criticality": previous, "new_criticality": locked.criticality},
            )

    if result.escalated:
        logger.warning(
            "Case %s escalated %s -> %s after %s (%d negatives, days_to_confra=%s)",
            locked.id, previous, locked.criticality, outcome,
            locked.negative_contact_count, locked.days_to_confra,
        )
    else:
        logger.info("Recorded %s/%s attempt for case %s", channel, outcome, locked.id)
    return result
