"""
Queue Ordering & Grouping

Read-time ordering of a case snapshot for the operator views. Everything
here is a pure function over already-fetched cases: no queries, no locks,
safe to run repeatedly.

Priority order (first difference wins):
  1. criticality, highest first
  2. days_to_confra, soonest first (no deadline sorts last)
  3. negative_contact_count, highest first
  4. days without contact, highest first
  5. updated_at, most recent first
  (case id as a last resort so equal cases never swap between runs)

Groupings:
  by status   fixed kanban columns, each sorted
  by origin   member's free-text "origem" normalized to MANHA / NOITE /
              EVENTO / NAO_INFORMADO, subdivided by status; empty origins
              are omitted
  by turno    cohort buckets; a case enrolled in several cohorts appears
              once in each of them
  by module   current-module columns, then removed modules, then "Sem módulo"
"""
import math
from dataclasses import dataclass, field
from datetime import datetime

from django.conf import settings

from discipleship.models.choices import CaseStatus, Criticality, Origin, Phase, Turno
from discipleship.services.criticality import criticality_rank
from discipleship.utils import normalize_tag

SECONDS_PER_DAY = 86400

STATUS_DISPLAY_ORDER = [
    CaseStatus.PENDENTE_MATRICULA.value,
    CaseStatus.EM_DISCIPULADO.value,
    CaseStatus.PAUSADO.value,
    CaseStatus.CONCLUIDO.value,
]
ACTIVE_STATUSES = STATUS_DISPLAY_ORDER[:3]

ORIGIN_DISPLAY_ORDER = [
    Origin.MANHA.value,
    Origin.NOITE.value,
    Origin.EVENTO.value,
    Origin.NAO_INFORMADO.value,
]

TURNO_DISPLAY_ORDER = [
    Turno.MANHA.value,
    Turno.TARDE.value,
    Turno.NOITE.value,
    Turno.NAO_INFORMADO.value,
]

# Synthetic sort positions for module columns without a live module
REMOVED_MODULE_ORDER = 9000
NO_MODULE_ORDER = 10000


@dataclass
class StatusGroup:
    status: str
    label: str
    items: list = field(default_factory=list)


@dataclass
class OriginGroup:
    origin: str
    label: str
    total: int
    statuses: list[StatusGroup] = field(default_factory=list)


@dataclass
class TurnoGroup:
    turno: str
    label: str
    items: list = field(default_factory=list)


@dataclass
class ModuleGroup:
    module_id: str | None
    title: str
    sort_order: int
    is_active: bool
    items: list = field(default_factory=list)


@dataclass
class WorkloadRow:
    assignee: str | None
    total: int = 0
    critical: int = 0
    without_contact: int = 0


# ─── Ordering ────────────────────────────────────────────────────────────────

def days_without_contact(case, now: datetime) -> int:
    if case.updated_at is None:
        return 0
    elapsed = (now - case.updated_at).total_seconds()
    return max(0, math.floor(elapsed / SECONDS_PER_DAY))


def priority_key(case, now: datetime) -> tuple:
    days_to_confra = case.days_to_confra if case.days_to_confra is not None else math.inf
    updated_ts = case.updated_at.timestamp() if case.updated_at else 0.0
    return (
        -criticality_rank(case.criticality),
        days_to_confra,
        -(case.negative_contact_count or 0),
        -days_without_contact(case, now),
        -updated_ts,
        str(case.id),
    )


def sort_cases(cases, now: datetime) -> list:
    return sorted(cases, key=lambda case: priority_key(case, now))


# ─── Filters ─────────────────────────────────────────────────────────────────

def active_cases(cases) -> list:
    return [case for case in cases if case.status != CaseStatus.CONCLUIDO]


def acolhimento_queue(cases, now: datetime) -> list:
    """
    Outreach queue: cases still in ACOLHIMENTO. A case confirmed for the
    confraternização counts as handled and never appears here, whatever its
    status or criticality.
    """
    pending = [
        case for case in cases
        if case.fase == Phase.ACOLHIMENTO and not case.confraternizacao_confirmada
    ]
    return sort_cases(pending, now)


def discipulado_board(cases, now: datetime) -> list:
    """Cases in DISCIPULADO plus acolhimento cases already confirmed for the confra."""
    board = [
        case for case in cases
        if case.fase == Phase.DISCIPULADO
        or (case.fase == Phase.ACOLHIMENTO and case.confraternizacao_confirmada)
    ]
    return sort_cases(board, now)


# ─── Grouping ────────────────────────────────────────────────────────────────

def group_by_status(cases, now: datetime, statuses=None) -> list[StatusGroup]:
    """Kanban columns in fixed order; empty columns are kept."""
    statuses = statuses or STATUS_DISPLAY_ORDER
    ordered = sort_cases(cases, now)
    return [
        StatusGroup(
            status=status,
            label=CaseStatus(status).label,
            items=[case for case in ordered if case.status == status],
        )
        for status in statuses
    ]


def normalize_origin(value: str | None) -> str:
    normalized = normalize_tag(value)
    if not normalized:
        return Origin.NAO_INFORMADO.value
    if "MANH" in normalized:
        return Origin.MANHA.value
    if "NOITE" in normalized or "QUARTA" in normalized:
        return Origin.NOITE.value
    if "MJ" in normalized or "EVENT" in normalized:
        return Origin.EVENTO.value
    return Origin.NAO_INFORMADO.value


def case_origin(case) -> str:
    member = getattr(case, "member", None)
    return normalize_origin(member.origem if member else None)


def group_by_origin(cases, now: datetime) -> list[OriginGroup]:
    """Origin sections subdivided by status. Sections and sub-groups with no cases are dropped."""
    ordered = sort_cases(cases, now)
    buckets = {origin: [] for origin in ORIGIN_DISPLAY_ORDER}
    for case in ordered:
        buckets[case_origin(case)].append(case)

    groups = []
    for origin in ORIGIN_DISPLAY_ORDER:
        items = buckets[origin]
        if not items:
            continue
        status_groups = [
            StatusGroup(
                status=status,
                label=CaseStatus(status).label,
                items=[case for case in items if case.status == status],
            )
            for status in STATUS_DISPLAY_ORDER
        ]
        groups.append(OriginGroup(
            origin=origin,
            label=Origin(origin).label,
            total=len(items),
            statuses=[group for group in status_groups if group.items],
        ))
    return groups


def normalize_turno(value: str | None) -> str:
    normalized = normalize_tag(value)
    if not normalized:
        return Turno.NAO_INFORMADO.value
    if "MANH" in normalized:
        return Turno.MANHA.value
    if "TARDE" in normalized:
        return Turno.TARDE.value
    if "NOITE" in normalized or "QUARTA" in normalized:
        return Turno.NOITE.value
    # Event and youth (MJ) services run in the afternoon slot
    if "EVENT" in normalized or "MJ" in normalized:
        return Turno.TARDE.value
    return Turno.NAO_INFORMADO.value


def case_turnos(case, progress_rows) -> list[str]:
    """
    Cohorts a case belongs to: the distinct turnos of its progress rows, or
    its own turno_origem when no row carries one.
    """
    turnos = []
    for row in progress_rows:
        if row.case_id != case.id or not row.turno:
            continue
        turno = normalize_turno(row.turno)
        if turno not in turnos:
            turnos.append(turno)
    if not turnos:
        turnos.append(normalize_turno(case.turno_origem))
    return turnos


def group_by_turno(cases, progress_rows, now: datetime) -> list[TurnoGroup]:
    """Cohort buckets; multi-cohort cases fan out into every cohort they attend."""
    progress_rows = list(progress_rows)
    buckets = {turno: [] for turno in TURNO_DISPLAY_ORDER}
    for case in sort_cases(cases, now):
        for turno in case_turnos(case, progress_rows):
            buckets[turno].append(case)
    return [
        TurnoGroup(turno=turno, label=Turno(turno).label, items=buckets[turno])
        for turno in TURNO_DISPLAY_ORDER
    ]


def group_by_module(cases, modules, now: datetime) -> list[ModuleGroup]:
    ordered_modules = sorted(modules, key=lambda module: (module.sort_order, module.title))
    groups = [
        ModuleGroup(
            module_id=str(module.id),
            title=module.title,
            sort_order=module.sort_order,
            is_active=module.is_active,
        )
        for module in ordered_modules
    ]
    by_module_id = {group.module_id: group for group in groups}
    unknown: dict[str, list] = {}
    without_module = []

    for case in sort_cases(cases, now):
        if not case.modulo_atual_id:
            without_module.append(case)
            continue
        module_id = str(case.modulo_atual_id)
        group = by_module_id.get(module_id)
        if group is not None:
            group.items.append(case)
        else:
            unknown.setdefault(module_id, []).append(case)

    for index, (module_id, items) in enumerate(unknown.items()):
        groups.append(ModuleGroup(
            module_id=module_id,
            title=f"Módulo removido ({module_id[:8]})",
            sort_order=REMOVED_MODULE_ORDER + index,
            is_active=False,
            items=items,
        ))

    groups.append(ModuleGroup(
        module_id=None,
        title="Sem módulo",
        sort_order=NO_MODULE_ORDER,
        is_active=False,
        items=without_module,
    ))
    return groups


# ─── Dashboard aggregates ────────────────────────────────────────────────────

def status_counts(cases) -> dict[str, int]:
    counts = {status: 0 for status in STATUS_DISPLAY_ORDER}
    for case in cases:
        status = str(case.status)
        if status in counts:
            counts[status] += 1
    return counts


def workload_by_assignee(cases, now: datetime, risk_days: int | None = None) -> list[WorkloadRow]:
    """
    Per-assignee load over active cases: how many, how many at ALTA or
    above, how many untouched for `risk_days` or more.
    """
    if risk_days is None:
        risk_days = int(getattr(settings, "DAYS_WITHOUT_CONTACT_RISK", 7))
    high_rank = criticality_rank(Criticality.ALTA.value)

    rows: dict[str | None, WorkloadRow] = {}
    for case in active_cases(cases):
        key = str(case.assigned_to) if case.assigned_to else None
        row = rows.setdefault(key, WorkloadRow(assignee=key))
        row.total += 1
        if criticality_rank(case.criticality) >= high_rank:
            row.critical += 1
        if days_without_contact(case, now) >= risk_days:
            row.without_contact += 1

    return sorted(rows.values(), key=lambda row: (-row.total, -row.critical, row.assignee or ""))
