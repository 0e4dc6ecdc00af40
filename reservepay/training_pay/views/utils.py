# views/utils.py
"""
Shared tooling for the API views:
- drf-spectacular helpers (error schema, parameter builders, response maps)
- error_response(): engine exceptions -> {"detail", "code"} with the exception's status
"""
from django.core.exceptions import ObjectDoesNotExist
from drf_spectacular.utils import (
    extend_schema, extend_schema_view,
    OpenApiParameter, OpenApiExample, OpenApiResponse, inline_serializer,
)
from drf_spectacular.types import OpenApiTypes
from rest_framework import serializers, status
from rest_framework.response import Response

from training_pay.exceptions import TrainingPayError

# ---- Reusable error schema
ErrorSerializer = inline_serializer(
    name="Error",
    fields={"detail": serializers.CharField(), "code": serializers.CharField(required=False)},
)

# ---- Param helpers

def path_int(name: str, description: str):
    return OpenApiParameter(name, OpenApiTypes.INT, OpenApiParameter.PATH, description=description)

def path_str(name: str, description: str, enum=None):
    return OpenApiParameter(name, OpenApiTypes.STR, OpenApiParameter.PATH, description=description, enum=enum)

def q_int(name: str, description: str, required: bool = False):
    return OpenApiParameter(name, OpenApiTypes.INT, OpenApiParameter.QUERY, required=required, description=description)

def q_date(name: str, description: str, required: bool = False):
    return OpenApiParameter(name, OpenApiTypes.DATE, OpenApiParameter.QUERY, required=required, description=description)

# ---- Convenience for common responses

def responses_ok(serializer_cls, many: bool = False, description: str | None = None, extra: dict | None = None):
    """Build a {200: ...} response mapping quickly."""
    serializer = serializer_cls(many=many) if isinstance(serializer_cls, type) else serializer_cls
    mapping = {200: OpenApiResponse(response=serializer, description=description or "OK")}
    if extra:
        mapping.update(extra)
    return mapping


def std_errors(extra: dict | None = None):
    """Standard error response mapping you can merge into responses=..."""
    errs = {
        400: OpenApiResponse(ErrorSerializer, description="Bad Request"),
        404: OpenApiResponse(ErrorSerializer, description="Not Found"),
    }
    if extra:
        errs.update(extra)
    return errs


def conflict_errors():
    return std_errors({409: OpenApiResponse(ErrorSerializer, description="Conflict (workflow or sequence)")})

# ---- Error mapping

def error_response(exc: Exception) -> Response:
    if isinstance(exc, TrainingPayError):
        return Response({"detail": exc.detail, "code": exc.code}, status=exc.status_code)
    if isinstance(exc, ObjectDoesNotExist):
        return Response({"detail": str(exc) or "Not found", "code": "not_found"}, status=status.HTTP_404_NOT_FOUND)
    raise exc
