"""Tests for module enrollment and the progress aggregate."""
import uuid

from django.test import TestCase

from discipleship.errors import DuplicateEnrollment, InvalidValue, NotFound
from discipleship.models import ModuleProgress
from discipleship.models.choices import CaseStatus, ProgressStatus
from discipleship.services import lifecycle
from discipleship.services.enrollment import enroll, set_module_status
from discipleship.services.progress import progress_summary
from tests.factories import NOW, make_case, make_module


class EnrollTests(TestCase):
    def setUp(self) -> None:
        self.case = make_case()
        self.module = make_module("Fundamentos", 1)

    def test_enroll_defaults_to_nao_iniciado(self) -> None:
        progress = enroll(self.case, self.module.id, turno="MANHA")

        self.assertEqual(progress.status, ProgressStatus.NAO_INICIADO)
        self.assertEqual(progress.turno, "MANHA")
        self.assertIsNone(progress.completed_at)

    def test_duplicate_enrollment_keeps_existing_row(self) -> None:
        first = enroll(self.case, self.module.id, initial_status=ProgressStatus.EM_ANDAMENTO)

        with self.assertRaises(DuplicateEnrollment):
            enroll(self.case, self.module.id, initial_status=ProgressStatus.CONCLUIDO)

        rows = ModuleProgress.objects.filter(case_id=self.case.id)
        self.assertEqual(rows.count(), 1)
        self.assertEqual(rows.get().id, first.id)
        self.assertEqual(rows.get().status, ProgressStatus.EM_ANDAMENTO)

    def test_enroll_concluded_stamps_completion(self) -> None:
        actor = uuid.uuid4()

        progress = enroll(self.case, self.module.id, initial_status=ProgressStatus.CONCLUIDO, actor=actor, now=NOW)

        self.assertEqual(progress.completed_at, NOW)
        self.assertEqual(progress.completed_by, actor)

    def test_enroll_unknown_status_or_module(self) -> None:
        with self.assertRaises(InvalidValue):
            enroll(self.case, self.module.id, initial_status="done")
        with self.assertRaises(NotFound):
            enroll(self.case, uuid.uuid4())

    def test_module_from_other_congregation_is_not_found(self) -> None:
        foreign = make_module("Outro", congregation_id=uuid.uuid4())

        with self.assertRaises(NotFound):
            enroll(self.case, foreign.id)

    def test_enrolling_open_module_reopens_concluded_case(self) -> None:
        enroll(self.case, self.module.id, initial_status=ProgressStatus.CONCLUIDO)
        lifecycle.conclude(self.case)

        enroll(self.case, make_module("Oração", 2).id)

        self.case.refresh_from_db()
        self.assertEqual(self.case.status, CaseStatus.EM_DISCIPULADO)


class SetModuleStatusTests(TestCase):
    def setUp(self) -> None:
        self.case = make_case()
        self.progress = enroll(self.case, make_module("Fundamentos").id)

    def test_completion_metadata_follows_status(self) -> None:
        actor = uuid.uuid4()

        done = set_module_status(self.progress, ProgressStatus.CONCLUIDO, actor=actor, now=NOW)
        self.assertEqual(done.completed_at, NOW)
        self.assertEqual(done.completed_by, actor)

        reopened = set_module_status(self.progress, ProgressStatus.EM_ANDAMENTO)
        self.assertIsNone(reopened.completed_at)
        self.assertIsNone(reopened.completed_by)

    def test_notes_update_without_status_change(self) -> None:
        row = set_module_status(self.progress, ProgressStatus.NAO_INICIADO, notes="Falta material")

        self.assertEqual(row.notes, "Falta material")
        self.assertEqual(row.status, ProgressStatus.NAO_INICIADO)

    def test_unknown_status(self) -> None:
        with self.assertRaises(InvalidValue):
            set_module_status(self.progress, "finished")


class ProgressSummaryTests(TestCase):
    def test_summary_counts_done_modules(self) -> None:
        case = make_case()
        self.assertEqual(progress_summary(case).to_dict(), {"total_modules": 0, "done_modules": 0, "progress_percent": 0})

        enroll(case, make_module("A", 1).id, initial_status=ProgressStatus.CONCLUIDO)
        enroll(case, make_module("B", 2).id)
        enroll(case, make_module("C", 3).id, initial_status=ProgressStatus.EM_ANDAMENTO)

        summary = progress_summary(case)
        self.assertEqual(summary.total_modules, 3)
        self.assertEqual(summary.done_modules, 1)
        self.assertEqual(summary.progress_percent, 33)
        self.assertFalse(summary.is_complete)
