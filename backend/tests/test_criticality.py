"""Tests for the criticality scorer."""
from datetime import date, datetime, timezone

from django.test import SimpleTestCase, override_settings

from discipleship.models import Confraternizacao, DiscipleshipCase
from discipleship.models.choices import ContactOutcome, Criticality
from discipleship.services.criticality import (
    criticality_rank, is_negative_outcome, refresh_case_metrics, score,
)


class ScoreTests(SimpleTestCase):
    def test_no_history_and_no_deadline_is_baixa(self) -> None:
        self.assertEqual(score(0, None), Criticality.BAIXA)

    def test_three_negatives_without_deadline_is_critica(self) -> None:
        self.assertEqual(score(3, None), Criticality.CRITICA)

    def test_deadline_today_without_negatives_is_alta(self) -> None:
        self.assertEqual(score(0, 0), Criticality.ALTA)

    def test_passed_deadline_is_at_least_alta(self) -> None:
        self.assertEqual(score(0, -4), Criticality.ALTA)
        self.assertEqual(score(1, -4), Criticality.ALTA)
        self.assertEqual(score(2, -4), Criticality.CRITICA)

    def test_contact_thresholds(self) -> None:
        self.assertEqual(score(1, None), Criticality.MEDIA)
        self.assertEqual(score(2, None), Criticality.ALTA)
        self.assertEqual(score(7, None), Criticality.CRITICA)

    def test_deadline_thresholds(self) -> None:
        self.assertEqual(score(0, 3), Criticality.ALTA)
        self.assertEqual(score(0, 4), Criticality.MEDIA)
        self.assertEqual(score(0, 7), Criticality.MEDIA)
        self.assertEqual(score(0, 8), Criticality.BAIXA)
        self.assertEqual(score(0, 120), Criticality.BAIXA)

    def test_more_negatives_never_lower_the_tier(self) -> None:
        for days in [None, -2, 0, 1, 3, 5, 7, 10, 30]:
            ranks = [criticality_rank(score(count, days)) for count in range(0, 6)]
            self.assertEqual(ranks, sorted(ranks), f"not monotonic for days={days}")

    def test_closer_deadline_never_lowers_the_tier(self) -> None:
        for count in range(0, 5):
            ranks = [criticality_rank(score(count, days)) for days in range(30, -3, -1)]
            self.assertEqual(ranks, sorted(ranks), f"not monotonic for negatives={count}")

    @override_settings(CRITICALITY_CRITICAL_NEGATIVES=5, CRITICALITY_MEDIUM_DAYS=14)
    def test_thresholds_follow_settings(self) -> None:
        self.assertEqual(score(3, None), Criticality.ALTA)
        self.assertEqual(score(5, None), Criticality.CRITICA)
        self.assertEqual(score(0, 14), Criticality.MEDIA)


class RankAndOutcomeTests(SimpleTestCase):
    def test_rank_total_order(self) -> None:
        tiers = [Criticality.BAIXA, Criticality.MEDIA, Criticality.ALTA, Criticality.CRITICA]
        self.assertEqual([criticality_rank(t) for t in tiers], [1, 2, 3, 4])
        self.assertEqual(criticality_rank("ALTA"), 3)

    def test_unknown_tier_ranks_lowest(self) -> None:
        self.assertEqual(criticality_rank(None), 1)
        self.assertEqual(criticality_rank("URGENTE"), 1)

    def test_negative_outcomes(self) -> None:
        self.assertTrue(is_negative_outcome(ContactOutcome.NO_ANSWER))
        self.assertTrue(is_negative_outcome("wrong_number"))
        self.assertTrue(is_negative_outcome("refused"))
        self.assertTrue(is_negative_outcome("sem_resposta"))
        self.assertFalse(is_negative_outcome("contacted"))
        self.assertFalse(is_negative_outcome("scheduled_visit"))

    def test_unknown_outcome_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            is_negative_outcome("busy")


class RefreshCaseMetricsTests(SimpleTestCase):
    now = datetime(2025, 3, 10, 23, 30, tzinfo=timezone.utc)

    def test_days_to_confra_counts_calendar_days(self) -> None:
        case = DiscipleshipCase(negative_contact_count=0)
        case.confraternizacao = Confraternizacao(data_evento=date(2025, 3, 13))

        changed = refresh_case_metrics(case, self.now)

        self.assertTrue(changed)
        self.assertEqual(case.days_to_confra, 3)
        self.assertEqual(case.criticality, Criticality.ALTA)

    def test_no_event_means_no_deadline(self) -> None:
        case = DiscipleshipCase(negative_contact_count=1, criticality=Criticality.MEDIA)

        changed = refresh_case_metrics(case, self.now)

        self.assertFalse(changed)
        self.assertIsNone(case.days_to_confra)
        self.assertEqual(case.criticality, Criticality.MEDIA)
