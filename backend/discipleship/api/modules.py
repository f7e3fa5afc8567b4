"""
Module API — curriculum modules and per-case enrollment.
"""
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from discipleship.api.responses import congregation_scope, error_response
from discipleship.errors import DiscipleshipError
from discipleship.models import DiscipleshipModule
from discipleship.serializers import (
    EnrollSerializer, ModuleProgressSerializer, ModuleSerializer, ProgressUpdateSerializer,
)
from discipleship.services import store
from discipleship.services.enrollment import enroll, set_module_status
from discipleship.services.progress import progress_summary


class ModuleListCreateView(APIView):
    """List a congregation's modules in curriculum order, or add one."""

    def get(self, request):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        modules = DiscipleshipModule.objects.filter(congregation_id=congregation_id)
        if request.query_params.get("active") in ("true", "1"):
            modules = modules.filter(is_active=True)
        return Response(ModuleSerializer(modules.order_by("sort_order", "title"), many=True).data)

    def post(self, request):
        serializer = ModuleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        module = serializer.save()
        return Response(ModuleSerializer(module).data, status=status.HTTP_201_CREATED)


class CaseEnrollView(APIView):
    """Enroll a case in a module."""

    def post(self, request, case_id):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        serializer = EnrollSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            case = store.get_case(case_id, congregation_id)
            progress = enroll(
                case,
                data["module_id"],
                initial_status=data["status"],
                actor=data.get("actor"),
                turno=data.get("turno"),
                notes=data.get("notes") or None,
            )
        except DiscipleshipError as exc:
            return error_response(exc)

        return Response(
            {
                "progress": ModuleProgressSerializer(progress).data,
                "summary": progress_summary(case).to_dict(),
            },
            status=status.HTTP_201_CREATED,
        )


class ProgressDetailView(APIView):
    """Change a module's status for one case."""

    def patch(self, request, progress_id):
        congregation_id, error = congregation_scope(request)
        if error:
            return error
        serializer = ProgressUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            progress = store.get_progress(progress_id, congregation_id)
            row = set_module_status(
                progress,
                data["status"],
                actor=data.get("actor"),
                notes=data.get("notes"),
            )
            case = store.get_case(row.case_id, congregation_id)
        except DiscipleshipError as exc:
            return error_response(exc)

        return Response({
            "progress": ModuleProgressSerializer(row).data,
            "summary": progress_summary(case).to_dict(),
            "case_status": case.status,
        })
