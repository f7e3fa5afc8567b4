"""
Confraternização event lookups.

The event date is the deadline anchor for urgency scoring: `days_until`
turns it into the `days_to_confra` figure stored on each linked case, and
`active_confraternizacao` picks the event a congregation is currently
working towards.
"""
import logging
from datetime import date

from discipleship.models.choices import ConfraternizacaoStatus
from discipleship.models.confraternizacao import Confraternizacao

logger = logging.getLogger(__name__)

STATUS_RANK = {
    ConfraternizacaoStatus.ATIVA.value: 0,
    ConfraternizacaoStatus.FUTURA.value: 1,
    ConfraternizacaoStatus.ENCERRADA.value: 2,
}


def days_until(event_date: date | None, today: date) -> int | None:
    """Whole calendar days from today to the event; negative once it has passed."""
    if event_date is None:
        return None
    return (event_date - today).days


def derive_status(event_date: date, today: date) -> str:
    if event_date == today:
        return ConfraternizacaoStatus.ATIVA.value
    if event_date > today:
        return ConfraternizacaoStatus.FUTURA.value
    return ConfraternizacaoStatus.ENCERRADA.value


def effective_status(event: Confraternizacao, today: date) -> str:
    """Stored status when set, otherwise derived from the event date."""
    if event.status and str(event.status) in STATUS_RANK:
        return str(event.status)
    return derive_status(event.data_evento, today)


def active_confraternizacao(congregation_id, today: date) -> Confraternizacao | None:
    """
    The active or next upcoming event for a congregation.

    Picks the earliest event dated today or later. When every event is in
    the past, falls back to the best one by status (ativa, futura, encerrada)
    and then by date, so callers still see the most relevant event.
    """
    events = list(
        Confraternizacao.objects
        .filter(congregation_id=congregation_id)
        .order_by("data_evento", "created_at")
    )
    if not events:
        return None

    upcoming = [event for event in events if event.data_evento >= today]
    if upcoming:
        return upcoming[0]

    return min(
        events,
        key=lambda event: (STATUS_RANK[effective_status(event, today)], event.data_evento),
    )
