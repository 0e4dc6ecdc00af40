# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers
from training_pay.models import CommutingRecord, GeoReferenceLocation
from training_pay.services.commuting_service import CAPTURE_TYPES


class GeoLocationWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = GeoReferenceLocation
        fields = ["id", "name", "latitude", "longitude", "radius_m", "is_active"]


class GeoLocationReadSerializer(serializers.ModelSerializer):
    class Meta:
        model = GeoReferenceLocation
        fields = ["id", "name", "latitude", "longitude", "radius_m", "is_active", "created_at"]
        read_only_fields = fields


class CommutingRecordReadSerializer(serializers.ModelSerializer):
    trainee_name = serializers.CharField(source="trainee.name", read_only=True)
    trainee_rank = serializers.CharField(source="trainee.rank", read_only=True)

    class Meta:
        model = CommutingRecord
        fields = [
            "id", "trainee_id", "trainee_name", "trainee_rank", "batch_id", "date",
            "check_in_at", "check_out_at",
            "check_in_lat", "check_in_lng", "check_out_lat", "check_out_lng",
            "check_in_location_id", "check_out_location_id",
            "is_manual", "note",
        ]


class CommutingSummaryRowSerializer(serializers.Serializer):
    record = CommutingRecordReadSerializer()
    counted = serializers.BooleanField()
    reason = serializers.CharField(allow_blank=True)


# ===== Writes =====
class CaptureSerializer(serializers.Serializer):
    trainee_id = serializers.IntegerField()
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)
    type = serializers.ChoiceField(choices=CAPTURE_TYPES)


class CaptureResultSerializer(serializers.Serializer):
    record = CommutingRecordReadSerializer()
    location = GeoLocationReadSerializer()
    distance_m = serializers.FloatField()


class ManualCommutingSerializer(serializers.Serializer):
    trainee_id = serializers.IntegerField()
    date = serializers.DateField()
    check_in = serializers.DateTimeField(required=False, allow_null=True)
    check_out = serializers.DateTimeField(required=False, allow_null=True)
    note = serializers.CharField(required=False, allow_blank=True, default="")
    batch_id = serializers.IntegerField(required=False, allow_null=True)
    actor_id = serializers.IntegerField(required=False, allow_null=True)
