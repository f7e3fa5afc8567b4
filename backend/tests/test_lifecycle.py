"""Tests for the case lifecycle state machine."""
import uuid
from datetime import date

from django.test import TestCase

from discipleship.errors import IncompleteModules, InvalidTransition, NotFound
from discipleship.models import CaseEvent, DiscipleshipCase
from discipleship.models.choices import CaseStatus, Criticality, Phase, ProgressStatus
from discipleship.services import lifecycle
from discipleship.services.contact_recorder import record_attempt
from discipleship.services.enrollment import enroll, set_module_status
from tests.factories import NOW, make_case, make_confraternizacao, make_module


class OpenCaseTests(TestCase):
    def test_new_case_starts_in_acolhimento(self) -> None:
        case = make_case()

        self.assertEqual(case.fase, Phase.ACOLHIMENTO)
        self.assertEqual(case.status, CaseStatus.PENDENTE_MATRICULA)
        self.assertEqual(case.criticality, Criticality.BAIXA)
        self.assertEqual(case.negative_contact_count, 0)
        self.assertTrue(CaseEvent.objects.filter(case=case, event_type="case_created").exists())

    def test_linked_event_sets_deadline(self) -> None:
        event = make_confraternizacao(date(2025, 3, 15))

        case = make_case(confraternizacao=event)

        self.assertEqual(case.days_to_confra, 5)
        self.assertEqual(case.criticality, Criticality.MEDIA)


class StartDiscipuladoTests(TestCase):
    def test_moves_to_discipulado_with_first_module(self) -> None:
        case = make_case()
        module = make_module("Fundamentos")

        case = lifecycle.start_discipulado(case, module.id, turno="NOITE")

        self.assertEqual(case.fase, Phase.DISCIPULADO)
        self.assertEqual(case.status, CaseStatus.EM_DISCIPULADO)
        self.assertEqual(case.modulo_atual_id, module.id)
        self.assertEqual(case.turno_origem, "NOITE")

    def test_only_from_acolhimento(self) -> None:
        case = make_case()
        module = make_module("Fundamentos")
        lifecycle.start_discipulado(case, module.id)

        with self.assertRaises(InvalidTransition):
            lifecycle.start_discipulado(case, module.id)

    def test_unknown_module(self) -> None:
        case = make_case()

        with self.assertRaises(NotFound):
            lifecycle.start_discipulado(case, uuid.uuid4())

        case.refresh_from_db()
        self.assertEqual(case.fase, Phase.ACOLHIMENTO)


class PauseReactivateTests(TestCase):
    def setUp(self) -> None:
        self.case = lifecycle.start_discipulado(make_case(), make_module("Fundamentos").id)

    def test_pause_and_reactivate(self) -> None:
        paused = lifecycle.pause(self.case)
        self.assertEqual(paused.status, CaseStatus.PAUSADO)

        active = lifecycle.reactivate(paused)
        self.assertEqual(active.status, CaseStatus.EM_DISCIPULADO)
        self.assertEqual(
            CaseEvent.objects.filter(case=self.case, event_type="status_changed").count(), 2
        )

    def test_pause_requires_em_discipulado(self) -> None:
        lifecycle.pause(self.case)

        with self.assertRaises(InvalidTransition):
            lifecycle.pause(self.case)

    def test_reactivate_requires_pausado(self) -> None:
        with self.assertRaises(InvalidTransition):
            lifecycle.reactivate(self.case)


class ConcludeTests(TestCase):
    def setUp(self) -> None:
        self.case = lifecycle.start_discipulado(make_case(), make_module("Fundamentos").id)

    def test_conclude_requires_all_modules_done(self) -> None:
        first = enroll(self.case, make_module("Módulo 1", 1).id, initial_status=ProgressStatus.CONCLUIDO)
        second = enroll(self.case, make_module("Módulo 2", 2).id, initial_status=ProgressStatus.EM_ANDAMENTO)
        self.assertEqual(first.status, ProgressStatus.CONCLUIDO)

        with self.assertRaises(IncompleteModules) as ctx:
            lifecycle.conclude(self.case)
        self.assertEqual(ctx.exception.context, {"done_modules": 1, "total_modules": 2})

        set_module_status(second, ProgressStatus.CONCLUIDO)
        concluded = lifecycle.conclude(self.case)

        self.assertEqual(concluded.status, CaseStatus.CONCLUIDO)
        self.assertEqual(DiscipleshipCase.objects.get(id=self.case.id).status, CaseStatus.CONCLUIDO)

    def test_conclude_without_modules_is_incomplete(self) -> None:
        with self.assertRaises(IncompleteModules) as ctx:
            lifecycle.conclude(self.case)

        self.assertEqual(ctx.exception.context["total_modules"], 0)
        self.assertIn("no enrolled modules", ctx.exception.message)

    def test_conclude_twice_is_invalid(self) -> None:
        enroll(self.case, make_module("Módulo 1").id, initial_status=ProgressStatus.CONCLUIDO)
        lifecycle.conclude(self.case)

        with self.assertRaises(InvalidTransition):
            lifecycle.conclude(self.case)

    def test_reopening_a_module_reverts_concluded_case(self) -> None:
        progress = enroll(self.case, make_module("Módulo 1").id, initial_status=ProgressStatus.CONCLUIDO)
        lifecycle.conclude(self.case)

        set_module_status(progress, ProgressStatus.EM_ANDAMENTO)

        self.case.refresh_from_db()
        self.assertEqual(self.case.status, CaseStatus.EM_DISCIPULADO)

    def test_advance_to_pos_discipulado(self) -> None:
        with self.assertRaises(InvalidTransition):
            lifecycle.advance_to_pos_discipulado(self.case)

        enroll(self.case, make_module("Módulo 1").id, initial_status=ProgressStatus.CONCLUIDO)
        lifecycle.conclude(self.case)
        case = lifecycle.advance_to_pos_discipulado(self.case)

        self.assertEqual(case.fase, Phase.POS_DISCIPULADO)
        self.assertEqual(case.status, CaseStatus.CONCLUIDO)


class ConfraternizacaoConfirmationTests(TestCase):
    def test_confirm_links_event_and_rescores_deadline(self) -> None:
        case = make_case()
        record_attempt(case, "no_answer", "whatsapp", now=NOW)
        event = make_confraternizacao(date(2025, 3, 11))

        confirmed = lifecycle.confirm_confraternizacao(case, event.id, now=NOW)

        self.assertTrue(confirmed.confraternizacao_confirmada)
        self.assertEqual(confirmed.confraternizacao_confirmada_em, NOW)
        self.assertEqual(confirmed.confraternizacao_id, event.id)
        self.assertEqual(confirmed.fase, Phase.ACOLHIMENTO)
        self.assertEqual(confirmed.status, CaseStatus.PENDENTE_MATRICULA)

        stored = DiscipleshipCase.objects.get(id=case.id)
        self.assertEqual(stored.days_to_confra, 1)
        self.assertEqual(stored.criticality, Criticality.ALTA)

    def test_confirm_replaces_stale_deadline_of_previous_event(self) -> None:
        old_event = make_confraternizacao(date(2025, 3, 30), titulo="Antiga")
        case = make_case(confraternizacao=old_event)
        self.assertEqual(case.days_to_confra, 20)
        new_event = make_confraternizacao(date(2025, 3, 16), titulo="Nova")

        lifecycle.confirm_confraternizacao(case, new_event.id, now=NOW)

        stored = DiscipleshipCase.objects.get(id=case.id)
        self.assertEqual(stored.days_to_confra, 6)
        self.assertEqual(stored.criticality, Criticality.MEDIA)

    def test_revoke_clears_confirmation(self) -> None:
        case = make_case()
        event = make_confraternizacao(date(2025, 3, 20))
        lifecycle.confirm_confraternizacao(case, event.id, now=NOW)

        revoked = lifecycle.revoke_confraternizacao(case)

        self.assertFalse(revoked.confraternizacao_confirmada)
        self.assertIsNone(revoked.confraternizacao_confirmada_em)
        self.assertEqual(revoked.confraternizacao_id, event.id)

    def test_revoke_without_confirmation_is_invalid(self) -> None:
        with self.assertRaises(InvalidTransition):
            lifecycle.revoke_confraternizacao(make_case())


class OperatorActionTests(TestCase):
    def test_reset_negative_contacts_lowers_tier(self) -> None:
        case = make_case()
        for _ in range(3):
            record_attempt(case, "no_answer", "whatsapp", now=NOW)

        reset = lifecycle.reset_negative_contacts(case, now=NOW)

        self.assertEqual(reset.negative_contact_count, 0)
        self.assertIsNone(reset.last_negative_contact_at)
        self.assertEqual(reset.criticality, Criticality.BAIXA)

    def test_assign(self) -> None:
        case = make_case()
        assignee = uuid.uuid4()

        assigned = lifecycle.assign(case, assignee)

        self.assertEqual(assigned.assigned_to, assignee)
        self.assertTrue(CaseEvent.objects.filter(case=case, event_type="case_assigned").exists())

    def test_move_to_module_requires_discipulado(self) -> None:
        case = make_case()
        module = make_module("Fundamentos")

        with self.assertRaises(InvalidTransition):
            lifecycle.move_to_module(case, module.id)

        lifecycle.start_discipulado(case, module.id)
        second = make_module("Oração", 2)
        moved = lifecycle.move_to_module(case, second.id)
        self.assertEqual(moved.modulo_atual_id, second.id)

        cleared = lifecycle.move_to_module(case, None)
        self.assertIsNone(cleared.modulo_atual_id)

    def test_delete_case_removes_dependents(self) -> None:
        case = make_case()
        record_attempt(case, "no_answer", "whatsapp", now=NOW)
        case_id = case.id

        lifecycle.delete_case(case)

        self.assertFalse(DiscipleshipCase.objects.filter(id=case_id).exists())
        self.assertFalse(CaseEvent.objects.filter(case_id=case_id).exists())
