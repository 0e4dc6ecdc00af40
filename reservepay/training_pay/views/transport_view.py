# -*- coding: utf-8 -*-
from __future__ import annotations
from django.core.exceptions import ObjectDoesNotExist
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from training_pay.exceptions import TrainingPayError
from training_pay.repositories.transport_repository import records_for_batch
from training_pay.selectors.directory_selector import get_batch
from training_pay.serializers.transport_serializer import (
    BatchCalculationSerializer,
    CommitRequestSerializer,
    CommitResultSerializer,
    ManualTransportSerializer,
    TransportRecordReadSerializer,
)
from training_pay.services import transport_service
from .utils import (
    extend_schema, extend_schema_view, OpenApiResponse,
    path_int, responses_ok, std_errors, error_response,
)


@extend_schema_view(
    get=extend_schema(
        tags=["Transport"], summary="Saved transport records of a batch",
        parameters=[path_int("batch_id", "Batch ID")],
        responses={**responses_ok(TransportRecordReadSerializer, many=True), **std_errors()},
    )
)
class TransportRecordListView(APIView):
    def get(self, request, batch_id: int):
        try:
            get_batch(batch_id)
        except ObjectDoesNotExist as e:
            return error_response(e)
        return Response(TransportRecordReadSerializer(records_for_batch(batch_id), many=True).data)


@extend_schema_view(
    post=extend_schema(
        tags=["Transport"], summary="Calculate transport for every trainee (nothing is saved)",
        description="Per-trainee status: OK, NO_ADDRESS, GEO_FAIL, ROUTE_FAIL or ERROR. "
                    "`saved_amount` shows the currently persisted amount for comparison.",
        parameters=[path_int("batch_id", "Batch ID")],
        request=None,
        responses={200: OpenApiResponse(BatchCalculationSerializer), **std_errors()},
    )
)
class TransportCalculateView(APIView):
    def post(self, request, batch_id: int):
        try:
            calc = transport_service.calculate_for_batch(batch_id)
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        return Response(BatchCalculationSerializer(calc).data)


@extend_schema_view(
    post=extend_schema(
        tags=["Transport"], summary="Persist accepted calculation results",
        parameters=[path_int("batch_id", "Batch ID")],
        request=CommitRequestSerializer,
        responses={200: OpenApiResponse(CommitResultSerializer), **std_errors()},
    )
)
class TransportCommitView(APIView):
    def post(self, request, batch_id: int):
        ser = CommitRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            result = transport_service.commit(batch_id, ser.validated_data["records"], actor=ser.validated_data.get("actor_id"))
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        return Response(CommitResultSerializer(result).data)


@extend_schema_view(
    put=extend_schema(
        tags=["Transport"], summary="Hand-enter a transport amount",
        parameters=[path_int("batch_id", "Batch ID")],
        request=ManualTransportSerializer,
        responses={200: OpenApiResponse(TransportRecordReadSerializer), **std_errors()},
    )
)
class TransportManualView(APIView):
    def put(self, request, batch_id: int):
        ser = ManualTransportSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data
        try:
            get_batch(batch_id)
            rec = transport_service.set_manual(
                v["trainee_id"], batch_id, v["amount"],
                address=v.get("address"), note=v.get("note", ""), actor=v.get("actor_id"),
            )
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        return Response(TransportRecordReadSerializer(rec).data, status=status.HTTP_200_OK)
