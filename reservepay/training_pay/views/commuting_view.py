# -*- coding: utf-8 -*-
from __future__ import annotations
from django.core.exceptions import ObjectDoesNotExist
from django.utils.dateparse import parse_date
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from training_pay.exceptions import TrainingPayError
from training_pay.models import GeoReferenceLocation
from training_pay.selectors import commuting_selector
from training_pay.serializers.commuting_serializer import (
    CaptureResultSerializer,
    CaptureSerializer,
    CommutingRecordReadSerializer,
    CommutingSummaryRowSerializer,
    GeoLocationReadSerializer,
    GeoLocationWriteSerializer,
    ManualCommutingSerializer,
)
from training_pay.services import commuting_service
from training_pay.services.geofence import Position
from .utils import (
    extend_schema, extend_schema_view, OpenApiExample, OpenApiResponse,
    path_int, q_date, q_int, responses_ok, std_errors, conflict_errors, error_response,
)


@extend_schema_view(
    post=extend_schema(
        tags=["Commuting"], summary="GPS check-in / check-out",
        description="Accepted only inside the radius of an active reference location. "
                    "A second check-in on the same day, or a check-out without a check-in, is rejected (409).",
        request=CaptureSerializer,
        responses={201: OpenApiResponse(CaptureResultSerializer), **conflict_errors()},
        examples=[
            OpenApiExample(
                "Check-in",
                value={"trainee_id": 7, "latitude": 37.5665, "longitude": 126.978, "type": "CHECK_IN"},
                request_only=True,
            )
        ],
    )
)
class CommutingCaptureView(APIView):
    def post(self, request):
        ser = CaptureSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data
        try:
            capture = commuting_service.validate_and_record(
                v["trainee_id"], Position(v["latitude"], v["longitude"]), v["type"],
            )
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        return Response(CaptureResultSerializer(capture).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    post=extend_schema(
        tags=["Commuting"], summary="Admin manual commuting record (no geofence)",
        request=ManualCommutingSerializer,
        responses={200: OpenApiResponse(CommutingRecordReadSerializer), **std_errors()},
    )
)
class CommutingManualView(APIView):
    def post(self, request):
        ser = ManualCommutingSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data
        try:
            rec = commuting_service.record_manual(
                v["trainee_id"], v["date"],
                check_in=v.get("check_in"), check_out=v.get("check_out"),
                note=v.get("note", ""), batch_id=v.get("batch_id"), actor=v.get("actor_id"),
            )
        except (TrainingPayError, ObjectDoesNotExist) as e:
            return error_response(e)
        return Response(CommutingRecordReadSerializer(rec).data)


@extend_schema_view(
    get=extend_schema(
        tags=["Commuting"], summary="List commuting records",
        parameters=[
            q_int("batch_id", "Batch filter"),
            q_int("trainee_id", "Trainee filter (takes precedence over batch_id)"),
            q_date("date", "Calendar day (YYYY-MM-DD)"),
        ],
        responses={**responses_ok(CommutingRecordReadSerializer, many=True), **std_errors()},
    )
)
class CommutingRecordListView(APIView):
    def get(self, request):
        qp = request.query_params
        try:
            batch_id = int(qp["batch_id"]) if qp.get("batch_id") else None
            trainee_id = int(qp["trainee_id"]) if qp.get("trainee_id") else None
        except (TypeError, ValueError):
            return Response({"detail": "batch_id / trainee_id must be integers"}, status=400)
        day = None
        if qp.get("date"):
            day = parse_date(qp["date"])
            if day is None:
                return Response({"detail": "date must be YYYY-MM-DD"}, status=400)
        qs = commuting_selector.commuting_records(batch_id=batch_id, trainee_id=trainee_id, day=day)
        return Response(CommutingRecordReadSerializer(qs, many=True).data)


@extend_schema_view(
    get=extend_schema(
        tags=["Commuting"], summary="Batch commuting rows with counted flag",
        description="Rows of trainees absent that day or outside the batch window are listed with `counted=false`.",
        parameters=[path_int("batch_id", "Batch ID")],
        responses={**responses_ok(CommutingSummaryRowSerializer, many=True), **std_errors()},
    )
)
class CommutingSummaryView(APIView):
    def get(self, request, batch_id: int):
        try:
            rows = commuting_selector.commuting_summary(batch_id)
        except ObjectDoesNotExist as e:
            return error_response(e)
        return Response(CommutingSummaryRowSerializer(rows, many=True).data)


@extend_schema_view(
    list=extend_schema(tags=["GeoLocation"], summary="List reference locations",
                       responses=OpenApiResponse(GeoLocationReadSerializer(many=True))),
    retrieve=extend_schema(tags=["GeoLocation"], summary="Get reference location",
                           responses={200: OpenApiResponse(GeoLocationReadSerializer), **std_errors()}),
    create=extend_schema(tags=["GeoLocation"], summary="Create reference location",
                         request=GeoLocationWriteSerializer,
                         responses={201: OpenApiResponse(GeoLocationReadSerializer), **std_errors()}),
    partial_update=extend_schema(tags=["GeoLocation"], summary="Update reference location",
                                 request=GeoLocationWriteSerializer,
                                 responses={200: OpenApiResponse(GeoLocationReadSerializer), **std_errors()}),
    destroy=extend_schema(tags=["GeoLocation"], summary="Delete reference location",
                          responses={204: OpenApiResponse(description="No Content"), **std_errors()}),
)
class GeoLocationViewSet(
    viewsets.GenericViewSet,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
):
    queryset = GeoReferenceLocation.objects.all()
    serializer_class = GeoLocationReadSerializer
    permission_classes = [permissions.AllowAny]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):
        active = self.request.query_params.get("active") in ("1", "true")
        return commuting_selector.list_locations(active_only=active)

    def create(self, request):
        ser = GeoLocationWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            loc = commuting_service.create_location(ser.validated_data)
        except TrainingPayError as e:
            return error_response(e)
        return Response(GeoLocationReadSerializer(loc).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        loc = self.get_object()
        ser = GeoLocationWriteSerializer(loc, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        try:
            loc = commuting_service.update_location(loc, ser.validated_data)
        except TrainingPayError as e:
            return error_response(e)
        return Response(GeoLocationReadSerializer(loc).data)

    def perform_destroy(self, instance):
        commuting_service.delete_location(instance)

    @extend_schema(tags=["GeoLocation"], summary="Activate reference location", request=None,
                   responses={200: OpenApiResponse(GeoLocationReadSerializer), **std_errors()})
    @action(detail=True, methods=["post"], url_path="activate")
    def activate(self, request, pk=None):
        loc = commuting_service.activate_location(self.get_object())
        return Response(GeoLocationReadSerializer(loc).data)

    @extend_schema(tags=["GeoLocation"], summary="Deactivate reference location", request=None,
                   responses={200: OpenApiResponse(GeoLocationReadSerializer), **std_errors()})
    @action(detail=True, methods=["post"], url_path="deactivate")
    def deactivate(self, request, pk=None):
        loc = commuting_service.deactivate_location(self.get_object())
        return Response(GeoLocationReadSerializer(loc).data)
