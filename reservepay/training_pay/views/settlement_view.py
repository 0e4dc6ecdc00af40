# -*- coding: utf-8 -*-
from __future__ import annotations
from django.core.exceptions import ObjectDoesNotExist
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from training_pay.exceptions import TrainingPayError
from training_pay.repositories import settlement_repository
from training_pay.serializers.settlement_serializer import (
    ActorSerializer,
    ClawbackReadSerializer,
    CreateProcessSerializer,
    MetadataSerializer,
    SettlementSummarySerializer,
    read_serializer_for,
)
from training_pay.services import settlement_service
from training_pay.services.settlement_fsm import MACHINES, machine_for
from .utils import (
    extend_schema, extend_schema_view, OpenApiResponse,
    path_int, path_str, responses_ok, std_errors, conflict_errors, error_response,
)

KIND_PARAM = path_str("kind", "Workflow kind", enum=[k.lower() for k in MACHINES])


@extend_schema_view(
    get=extend_schema(
        tags=["Settlement"], summary="Workflow state and totals for a batch",
        description="`net = ledger_total - refund_total`, where ledger_total is compensation + transport.",
        parameters=[path_int("batch_id", "Batch ID")],
        responses={**responses_ok(SettlementSummarySerializer), **std_errors()},
    )
)
class SettlementSummaryView(APIView):
    def get(self, request, batch_id: int):
        try:
            data = settlement_service.settlement_summary(batch_id)
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        return Response(SettlementSummarySerializer(data).data)


@extend_schema_view(
    post=extend_schema(
        tags=["Settlement"], summary="Create a disbursement or request a clawback",
        description="Clawback requires the batch's disbursement at its final stage.",
        parameters=[KIND_PARAM],
        request=CreateProcessSerializer,
        responses={201: OpenApiResponse(ClawbackReadSerializer), **conflict_errors()},
    )
)
class SettlementCreateView(APIView):
    def post(self, request, kind: str):
        ser = CreateProcessSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        fields = dict(ser.validated_data)
        batch_id = fields.pop("batch_id")
        actor = fields.pop("actor_id", None)
        try:
            process = settlement_service.create(kind, batch_id, actor=actor, **fields)
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        return Response(read_serializer_for(process).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    get=extend_schema(
        tags=["Settlement"], summary="Get a process",
        parameters=[KIND_PARAM, path_int("pk", "Process ID")],
        responses={200: OpenApiResponse(ClawbackReadSerializer), **std_errors()},
    ),
    patch=extend_schema(
        tags=["Settlement"], summary="Edit free-text metadata and admin amounts",
        parameters=[KIND_PARAM, path_int("pk", "Process ID")],
        request=MetadataSerializer,
        responses={200: OpenApiResponse(ClawbackReadSerializer), **std_errors()},
    ),
)
class SettlementDetailView(APIView):
    def get(self, request, kind: str, pk: int):
        try:
            process = settlement_repository.get(machine_for(kind).kind, pk)
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        return Response(read_serializer_for(process).data)

    def patch(self, request, kind: str, pk: int):
        ser = MetadataSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        fields = dict(ser.validated_data)
        actor = fields.pop("actor_id", None)
        try:
            process = settlement_service.update_metadata(kind, pk, fields, actor=actor)
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        return Response(read_serializer_for(process).data)


class _TransitionView(APIView):
    forward = True

    def post(self, request, kind: str, pk: int):
        ser = ActorSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        op = settlement_service.advance if self.forward else settlement_service.revert
        try:
            process = op(kind, pk, actor=ser.validated_data.get("actor_id"))
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        return Response(read_serializer_for(process).data)


@extend_schema_view(
    post=extend_schema(
        tags=["Settlement"], summary="Advance to the next stage",
        description="Stamps the entered stage's milestone. 409 at the last stage.",
        parameters=[KIND_PARAM, path_int("pk", "Process ID")],
        request=ActorSerializer,
        responses={200: OpenApiResponse(ClawbackReadSerializer), **conflict_errors()},
    )
)
class SettlementAdvanceView(_TransitionView):
    forward = True


@extend_schema_view(
    post=extend_schema(
        tags=["Settlement"], summary="Revert to the previous stage",
        description="Clears the milestone of the stage being left. 409 at the first stage.",
        parameters=[KIND_PARAM, path_int("pk", "Process ID")],
        request=ActorSerializer,
        responses={200: OpenApiResponse(ClawbackReadSerializer), **conflict_errors()},
    )
)
class SettlementRevertView(_TransitionView):
    forward = False
