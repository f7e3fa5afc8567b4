"""
Seed data script — populates the database with a demo congregation
covering the whole discipleship funnel (acolhimento -> discipulado ->
pós-discipulado).

Usage: cd backend && python seed_data.py
"""
import os
import sys
import uuid
from datetime import timedelta

import django

# Setup Django
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'church_portal.settings')
django.setup()

from discipleship.models import Confraternizacao, DiscipleshipCase, DiscipleshipModule, Member
from discipleship.models.choices import ProgressStatus
from discipleship.services import lifecycle
from discipleship.services.contact_recorder import record_attempt
from discipleship.services.enrollment import enroll
from discipleship.utils import utcnow

DEMO_CONGREGATION_ID = uuid.UUID("0f4c2a8e-3b1d-4c6a-9e55-6d2b7f0a1c01")

MODULES = [
    ("Fundamentos da Fé", 1),
    ("Vida de Oração", 2),
    ("Palavra de Deus", 3),
    ("Vida em Comunidade", 4),
]

MEMBERS = [
    # ─── Acolhimento (outreach queue) ───────────────────────────────
    {"nome_completo": "Ana Beatriz Souza", "telefone_whatsapp": "+55 11 98888-0101", "origem": "Culto da Manhã"},
    {"nome_completo": "Bruno Carvalho", "telefone_whatsapp": "+55 11 98888-0102", "origem": "Culto de quarta"},
    {"nome_completo": "Camila Ferreira", "telefone_whatsapp": "+55 11 98888-0103", "origem": "MJ"},
    {"nome_completo": "Diego Santos", "telefone_whatsapp": None, "origem": None},

    # ─── Discipulado ────────────────────────────────────────────────
    {"nome_completo": "Eduarda Lima", "telefone_whatsapp": "+55 11 98888-0105", "origem": "Culto da Noite"},
    {"nome_completo": "Felipe Rocha", "telefone_whatsapp": "+55 11 98888-0106", "origem": "manhã"},
    {"nome_completo": "Gabriela Nunes", "telefone_whatsapp": "+55 11 98888-0107", "origem": "Evento de Páscoa"},

    # ─── Pós-discipulado ────────────────────────────────────────────
    {"nome_completo": "Henrique Alves", "telefone_whatsapp": "+55 11 98888-0108", "origem": "Culto da Manhã"},
]

# (member index, outcome, channel)
ATTEMPTS = [
    (0, "no_answer", "whatsapp"),
    (1, "no_answer", "whatsapp"),
    (1, "no_answer", "ligacao"),
    (1, "sem_resposta", "whatsapp"),
    (2, "wrong_number", "ligacao"),
    (2, "no_answer", "whatsapp"),
    (3, "contacted", "visita"),
    (5, "refused", "whatsapp"),
]


def seed():
    # Check if already seeded
    existing = DiscipleshipCase.objects.filter(congregation_id=DEMO_CONGREGATION_ID).count()
    if existing > 0:
        print(f"Demo congregation already has {existing} cases. Skipping seed.")
        print("Run 'python manage.py flush --no-input' to clear, then re-seed.")
        return

    now = utcnow()
    event = Confraternizacao.objects.create(
        congregation_id=DEMO_CONGREGATION_ID,
        titulo="Confraternização de Integração",
        data_evento=(now + timedelta(days=5)).date(),
    )
    modules = [
        DiscipleshipModule.objects.create(congregation_id=DEMO_CONGREGATION_ID, title=title, sort_order=order)
        for title, order in MODULES
    ]
    print(f"Created confraternização on {event.data_evento} and {len(modules)} modules")

    cases = []
    for member_data in MEMBERS:
        member = Member.objects.create(congregation_id=DEMO_CONGREGATION_ID, **member_data)
        cases.append(lifecycle.open_case(member, confraternizacao=event, now=now))
    print(f"Created {len(cases)} cases")

    for i, (idx, outcome, channel) in enumerate(ATTEMPTS):
        result = record_attempt(cases[idx], outcome, channel, now=now)
        cases[idx] = result.case
        print(
            f"  [{i+1}/{len(ATTEMPTS)}] {result.case.member.nome_completo}: {channel}/{outcome} "
            f"-> {result.case.criticality}"
        )

    # Camila confirmed for the confra: leaves the acolhimento queue
    cases[2] = lifecycle.confirm_confraternizacao(cases[2], event.id, now=now)

    # Discipulado cohort
    for idx, turno in [(4, "NOITE"), (5, "MANHA"), (6, "TARDE")]:
        cases[idx] = lifecycle.start_discipulado(cases[idx], modules[0].id, turno=turno)
        enroll(cases[idx], modules[0].id, initial_status=ProgressStatus.EM_ANDAMENTO, turno=turno)
    enroll(cases[4], modules[1].id, turno="MANHA")
    cases[6] = lifecycle.pause(cases[6])

    # Henrique finished every module and moved on
    cases[7] = lifecycle.start_discipulado(cases[7], modules[0].id, turno="MANHA")
    for module in modules:
        enroll(cases[7], module.id, initial_status=ProgressStatus.CONCLUIDO, turno="MANHA", now=now)
    lifecycle.conclude(cases[7])
    cases[7] = lifecycle.advance_to_pos_discipulado(cases[7])

    # Print summary
    print(f"\n{'='*50}")
    print(f"Seed complete! {len(cases)} cases across the funnel:\n")
    for case in cases:
        case.refresh_from_db()
        print(
            f"  {case.member.nome_completo:20s} | {case.fase:15s} | {case.status:18s} | {case.criticality}"
        )
    print(f"\nCongregation id: {DEMO_CONGREGATION_ID}")
    print(f"Run the server: python manage.py runserver")


if __name__ == "__main__":
    seed()
