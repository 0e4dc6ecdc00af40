# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers
from training_pay.models import TransportRecord, TransportStatus


class TransportRecordReadSerializer(serializers.ModelSerializer):
    trainee_name = serializers.CharField(source="trainee.name", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = TransportRecord
        fields = [
            "id",
            "trainee_id",
            "trainee_name",
            "batch_id",
            "amount",
            "address",
            "distance_km",
            "fuel_cost",
            "toll_cost",
            "status",
            "status_display",
            "is_manual",
            "note",
            "calculated_at",
            "updated_at",
        ]


class TransportResultSerializer(serializers.Serializer):
    trainee_id = serializers.IntegerField()
    name = serializers.CharField()
    rank = serializers.CharField(allow_blank=True)
    address = serializers.CharField(allow_blank=True)
    status = serializers.ChoiceField(choices=TransportStatus.choices)
    distance_km = serializers.DecimalField(max_digits=8, decimal_places=2, allow_null=True)
    amount = serializers.IntegerField(allow_null=True)
    fuel_cost = serializers.IntegerField(allow_null=True)
    toll_cost = serializers.IntegerField(allow_null=True)
    error = serializers.CharField(allow_blank=True)
    saved_amount = serializers.IntegerField(allow_null=True)
    is_manual = serializers.BooleanField()


class BatchCalculationSerializer(serializers.Serializer):
    batch_id = serializers.IntegerField()
    unit_name = serializers.CharField()
    cancelled = serializers.BooleanField()
    results = TransportResultSerializer(many=True)


# ===== Writes =====
class CommitItemSerializer(serializers.Serializer):
    trainee_id = serializers.IntegerField()
    amount = serializers.IntegerField(min_value=0, allow_null=True)
    status = serializers.ChoiceField(choices=TransportStatus.choices, default=TransportStatus.OK)
    address = serializers.CharField(required=False, allow_blank=True, default="")
    distance_km = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True)
    fuel_cost = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    toll_cost = serializers.IntegerField(required=False, allow_null=True, min_value=0)


class CommitRequestSerializer(serializers.Serializer):
    records = CommitItemSerializer(many=True)
    actor_id = serializers.IntegerField(required=False, allow_null=True)


class CommitSkipSerializer(serializers.Serializer):
    trainee_id = serializers.IntegerField(allow_null=True)
    reason = serializers.CharField()


class CommitResultSerializer(serializers.Serializer):
    saved = TransportRecordReadSerializer(many=True)
    skipped = CommitSkipSerializer(many=True)


class ManualTransportSerializer(serializers.Serializer):
    trainee_id = serializers.IntegerField()
    amount = serializers.IntegerField(min_value=0)
    address = serializers.CharField(required=False, allow_blank=True)
    note = serializers.CharField(required=False, allow_blank=True, default="")
    actor_id = serializers.IntegerField(required=False, allow_null=True)
