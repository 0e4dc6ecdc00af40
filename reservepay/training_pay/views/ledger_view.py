# -*- coding: utf-8 -*-
from __future__ import annotations
from django.core.exceptions import ObjectDoesNotExist
from rest_framework.response import Response
from rest_framework.views import APIView

from training_pay.exceptions import TrainingPayError
from training_pay.serializers.ledger_serializer import (
    CompensationRowReadSerializer,
    LedgerSessionSerializer,
    LedgerTotalsSerializer,
    LedgerTraineeSerializer,
    OverrideSerializer,
    SyncRequestSerializer,
    SyncResultSerializer,
)
from training_pay.services import compensation_service
from training_pay.selectors import ledger_selector
from training_pay.selectors.directory_selector import get_batch
from .utils import (
    extend_schema, extend_schema_view, OpenApiExample, OpenApiResponse,
    path_int, responses_ok, std_errors, error_response,
)


@extend_schema_view(
    post=extend_schema(
        tags=["Ledger"], summary="Sync compensation rows for a batch",
        description="Recomputes hours and amounts for every eligible (trainee, session) pair. "
                    "Overrides are kept. Rows that failed carry `error` and zero hours.",
        parameters=[path_int("batch_id", "Batch ID")],
        request=SyncRequestSerializer,
        responses={200: OpenApiResponse(SyncResultSerializer), **std_errors()},
    )
)
class LedgerSyncView(APIView):
    def post(self, request, batch_id: int):
        ser = SyncRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            result = compensation_service.sync(batch_id, actor=ser.validated_data.get("actor_id"))
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        data = {
            "batch_id": result.batch_id,
            "synced": result.synced,
            "deleted": result.deleted,
            "rows": result.rows,
        }
        return Response(SyncResultSerializer(data).data)


@extend_schema_view(
    get=extend_schema(
        tags=["Ledger"], summary="Ledger rows grouped by trainee",
        parameters=[path_int("batch_id", "Batch ID")],
        responses={**responses_ok(LedgerTraineeSerializer, many=True), **std_errors()},
    )
)
class LedgerRowsView(APIView):
    def get(self, request, batch_id: int):
        try:
            get_batch(batch_id)
        except ObjectDoesNotExist as e:
            return error_response(e)
        return Response(LedgerTraineeSerializer(ledger_selector.ledger_rows(batch_id), many=True).data)


@extend_schema_view(
    get=extend_schema(
        tags=["Ledger"], summary="Per-session ledger overview",
        parameters=[path_int("batch_id", "Batch ID")],
        responses={**responses_ok(LedgerSessionSerializer, many=True), **std_errors()},
    )
)
class LedgerOverviewView(APIView):
    def get(self, request, batch_id: int):
        try:
            get_batch(batch_id)
        except ObjectDoesNotExist as e:
            return error_response(e)
        return Response(LedgerSessionSerializer(ledger_selector.ledger_overview(batch_id), many=True).data)


@extend_schema_view(
    get=extend_schema(
        tags=["Ledger"], summary="Batch total and per-trainee totals (final rates)",
        parameters=[path_int("batch_id", "Batch ID")],
        responses={**responses_ok(LedgerTotalsSerializer), **std_errors()},
    )
)
class LedgerTotalsView(APIView):
    def get(self, request, batch_id: int):
        try:
            get_batch(batch_id)
        except ObjectDoesNotExist as e:
            return error_response(e)
        by_trainee = compensation_service.totals_by_trainee(batch_id)
        data = {
            "batch_id": batch_id,
            "total": compensation_service.total_for_batch(batch_id),
            "by_trainee": [{"trainee_id": k, "total": v} for k, v in sorted(by_trainee.items())],
        }
        return Response(LedgerTotalsSerializer(data).data)


@extend_schema_view(
    put=extend_schema(
        tags=["Ledger"], summary="Set or clear a manual override",
        request=OverrideSerializer,
        responses={200: OpenApiResponse(CompensationRowReadSerializer), **std_errors()},
        examples=[
            OpenApiExample("Set", value={"trainee_id": 3, "session_id": 12, "amount": 90000, "actor_id": 1}, request_only=True),
            OpenApiExample("Clear", value={"trainee_id": 3, "session_id": 12, "amount": None}, request_only=True),
        ],
    )
)
class LedgerOverrideView(APIView):
    def put(self, request):
        ser = OverrideSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data
        try:
            row = compensation_service.set_override(v["trainee_id"], v["session_id"], v["amount"], actor=v.get("actor_id"))
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        return Response(CompensationRowReadSerializer(row).data)
