"""The demo seed runs end to end through the services."""
from contextlib import redirect_stdout
from io import StringIO

from django.test import TestCase

import seed_data
from discipleship.models import DiscipleshipCase
from discipleship.models.choices import CaseStatus, Phase
from discipleship.services import queue
from discipleship.utils import utcnow


class SeedDataTests(TestCase):
    def test_seed_populates_the_funnel_once(self) -> None:
        with redirect_stdout(StringIO()):
            seed_data.seed()
            seed_data.seed()

        cases = list(
            DiscipleshipCase.objects
            .filter(congregation_id=seed_data.DEMO_CONGREGATION_ID)
            .select_related("member")
        )
        self.assertEqual(len(cases), len(seed_data.MEMBERS))

        phases = {str(case.fase) for case in cases}
        self.assertEqual(phases, {Phase.ACOLHIMENTO.value, Phase.DISCIPULADO.value, Phase.POS_DISCIPULADO.value})
        self.assertIn(CaseStatus.PAUSADO.value, {str(case.status) for case in cases})

        outreach = queue.acolhimento_queue(cases, utcnow())
        self.assertEqual(outreach[0].member.nome_completo, "Bruno Carvalho")
        self.assertNotIn("Camila Ferreira", [case.member.nome_completo for case in outreach])
