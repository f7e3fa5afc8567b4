"""Tests for confraternização lookups."""
import uuid
from datetime import date

from django.test import SimpleTestCase, TestCase

from discipleship.models import Confraternizacao
from discipleship.services.confraternizacao import (
    active_confraternizacao, days_until, derive_status, effective_status,
)
from tests.factories import CONGREGATION_ID, make_confraternizacao

TODAY = date(2025, 3, 10)


class DaysUntilTests(SimpleTestCase):
    def test_days_until(self) -> None:
        self.assertEqual(days_until(date(2025, 3, 17), TODAY), 7)
        self.assertEqual(days_until(TODAY, TODAY), 0)
        self.assertEqual(days_until(date(2025, 3, 8), TODAY), -2)
        self.assertIsNone(days_until(None, TODAY))

    def test_derived_status(self) -> None:
        self.assertEqual(derive_status(TODAY, TODAY), "ativa")
        self.assertEqual(derive_status(date(2025, 4, 1), TODAY), "futura")
        self.assertEqual(derive_status(date(2025, 1, 1), TODAY), "encerrada")

    def test_stored_status_wins(self) -> None:
        event = Confraternizacao(data_evento=date(2025, 1, 1), status="ativa")

        self.assertEqual(effective_status(event, TODAY), "ativa")


class ActiveConfraternizacaoTests(TestCase):
    def test_picks_earliest_upcoming_event(self) -> None:
        make_confraternizacao(date(2025, 2, 1), titulo="Fevereiro")
        make_confraternizacao(date(2025, 5, 1), titulo="Maio")
        make_confraternizacao(date(2025, 3, 20), titulo="Março")

        event = active_confraternizacao(CONGREGATION_ID, TODAY)

        self.assertEqual(event.titulo, "Março")

    def test_event_today_is_active(self) -> None:
        today_event = make_confraternizacao(TODAY, titulo="Hoje")
        make_confraternizacao(date(2025, 3, 11), titulo="Amanhã")

        self.assertEqual(active_confraternizacao(today_event.congregation_id, TODAY), today_event)

    def test_falls_back_to_best_past_event(self) -> None:
        make_confraternizacao(date(2025, 1, 5), titulo="Janeiro")
        marked = make_confraternizacao(date(2025, 2, 5), titulo="Fevereiro", status="ativa")

        self.assertEqual(active_confraternizacao(marked.congregation_id, TODAY), marked)

    def test_no_events(self) -> None:
        self.assertIsNone(active_confraternizacao(uuid.uuid4(), TODAY))
