"""
Shared response helpers for the discipleship API.

Maps engine errors to HTTP statuses and reads the explicit congregation
scope every query endpoint requires.
"""
import uuid

from rest_framework import status
from rest_framework.response import Response

from discipleship.errors import (
    DiscipleshipError, DuplicateEnrollment, IncompleteModules, InvalidTransition,
    InvalidValue, NotFound, PersistenceFailure,
)

ERROR_STATUS = {
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidValue: status.HTTP_400_BAD_REQUEST,
    InvalidTransition: status.HTTP_409_CONFLICT,
    IncompleteModules: status.HTTP_409_CONFLICT,
    DuplicateEnrollment: status.HTTP_409_CONFLICT,
    PersistenceFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(exc: DiscipleshipError) -> Response:
    http_status = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return Response(exc.to_dict(), status=http_status)


def congregation_scope(request):
    """
    Returns (congregation_id, None) or (None, error Response).
    Queries are never scoped implicitly.
    """
    raw = request.query_params.get("congregation_id")
    if not raw:
        return None, Response(
            {"detail": "congregation_id query parameter is required", "code": "invalid_value"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    try:
        return uuid.UUID(raw), None
    except ValueError:
        return None, Response(
            {"detail": f"Invalid congregation_id: {raw}", "code": "invalid_value"},
            status=status.HTTP_400_BAD_REQUEST,
        )


def int_param(request, name: str, default: int, maximum: int | None = None):
    """
    Returns (value, None) or (None, error Response) for a non-negative
    integer query parameter, capped at `maximum` when given.
    """
    raw = request.query_params.get(name)
    if raw is None or raw == "":
        value = default
    else:
        try:
            value = int(raw)
        except ValueError:
            value = -1
        if value < 0:
            return None, Response(
                {"detail": f"{name} must be a non-negative integer, got {raw!r}", "code": "invalid_value"},
                status=status.HTTP_400_BAD_REQUEST,
            )
    if maximum is not None:
        value = min(value, maximum)
    return value, None
