"""
Queue API — operator views over a congregation's cases.

All views read one snapshot of the congregation and hand it to the pure
ordering/grouping functions in services.queue.
"""
import logging

from django.conf import settings
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from discipleship.api.responses import congregation_scope, int_param
from discipleship.models import DiscipleshipCase, DiscipleshipModule, ModuleProgress
from discipleship.serializers import CaseSummarySerializer
from discipleship.services import queue
from discipleship.services.criticality_sweep import refresh_congregation_criticality
from discipleship.utils import utcnow

logger = logging.getLogger(__name__)

QUEUE_VIEWS = ["priority", "acolhimento", "status", "origin", "turno", "module", "discipulado"]


def _cards(cases):
    return CaseSummarySerializer(cases, many=True).data


def _status_groups(groups):
    return [
        {"status": group.status, "label": group.label, "total": len(group.items), "items": _cards(group.items)}
        for group in groups
    ]


class QueueView(APIView):
    """
    GET queue/?congregation_id=...&view=priority|acolhimento|status|origin|turno|module|discipulado

    `active=true` drops concluded cases before ordering.
    """

    def get(self, request):
        congregation_id, error = congregation_scope(request)
        if error:
            return error

        view = request.query_params.get("view", "priority")
        if view not in QUEUE_VIEWS:
            return Response(
                {"detail": f"Unknown view: {view}", "code": "invalid_value", "views": QUEUE_VIEWS},
                status=status.HTTP_400_BAD_REQUEST,
            )

        now = utcnow()
        cases = list(
            DiscipleshipCase.objects
            .filter(congregation_id=congregation_id)
            .select_related("member")
        )
        if request.query_params.get("active") in ("true", "1"):
            cases = queue.active_cases(cases)

        if view == "priority":
            data = {"items": _cards(queue.sort_cases(cases, now))}
        elif view == "acolhimento":
            limit, error = int_param(request, "limit", settings.ACOLHIMENTO_QUEUE_LIMIT)
            if error:
                return error
            items = queue.acolhimento_queue(cases, now)
            data = {"total": len(items), "items": _cards(items[:limit])}
        elif view == "discipulado":
            data = {"items": _cards(queue.discipulado_board(cases, now))}
        elif view == "status":
            data = {
                "counts": queue.status_counts(cases),
                "groups": _status_groups(queue.group_by_status(cases, now)),
            }
        elif view == "origin":
            data = {
                "groups": [
                    {
                        "origin": group.origin,
                        "label": group.label,
                        "total": group.total,
                        "statuses": _status_groups(group.statuses),
                    }
                    for group in queue.group_by_origin(cases, now)
                ]
            }
        elif view == "turno":
            progress_rows = ModuleProgress.objects.filter(case__congregation_id=congregation_id)
            data = {
                "groups": [
                    {"turno": group.turno, "label": group.label, "total": len(group.items), "items": _cards(group.items)}
                    for group in queue.group_by_turno(cases, progress_rows, now)
                ]
            }
        else:
            modules = DiscipleshipModule.objects.filter(congregation_id=congregation_id)
            data = {
                "groups": [
                    {
                        "module_id": group.module_id,
                        "title": group.title,
                        "sort_order": group.sort_order,
                        "is_active": group.is_active,
                        "total": len(group.items),
                        "items": _cards(group.items),
                    }
                    for group in queue.group_by_module(cases, modules, now)
                ]
            }

        data["view"] = view
        return Response(data)


class WorkloadView(APIView):
    """Per-assignee load over the congregation's active cases."""

    def get(self, request):
        congregation_id, error = congregation_scope(request)
        if error:
            return error

        cases = DiscipleshipCase.objects.filter(congregation_id=congregation_id)
        rows = queue.workload_by_assignee(cases, utcnow())
        return Response([
            {
                "assignee": row.assignee,
                "total": row.total,
                "critical": row.critical,
                "without_contact": row.without_contact,
            }
            for row in rows
        ])


class CriticalityRefreshView(APIView):
    """Recompute days_to_confra and criticality for a congregation right now."""

    def post(self, request):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        result = refresh_congregation_criticality(congregation_id)
        return Response(result)
