# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers
from training_pay.models import CompensationRow, Trainee, TrainingSession


class TraineeBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Trainee
        fields = ["id", "name", "rank", "service_number"]


class SessionBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = TrainingSession
        fields = ["id", "title", "category", "date", "start_time", "end_time", "lunch_window"]


class CompensationRowReadSerializer(serializers.ModelSerializer):
    session = SessionBriefSerializer(read_only=True)
    final_rate = serializers.IntegerField(read_only=True)
    is_overridden = serializers.BooleanField(read_only=True)

    class Meta:
        model = CompensationRow
        fields = [
            "id",
            "trainee_id",
            "session",
            "training_hours",
            "is_weekend",
            "daily_rate",
            "override_rate",
            "final_rate",
            "is_overridden",
            "sync_error",
            "synced_at",
        ]


class LedgerTraineeSerializer(serializers.Serializer):
    trainee = TraineeBriefSerializer()
    rows = CompensationRowReadSerializer(many=True)
    hours = serializers.DecimalField(max_digits=8, decimal_places=2)
    total = serializers.IntegerField()


class LedgerSessionSerializer(serializers.Serializer):
    session = SessionBriefSerializer()
    hours = serializers.DecimalField(max_digits=5, decimal_places=2, allow_null=True)
    is_weekend = serializers.BooleanField(allow_null=True)
    daily_rate = serializers.IntegerField(allow_null=True)
    trainees = serializers.IntegerField()
    overridden = serializers.IntegerField()
    errors = serializers.IntegerField()
    total = serializers.IntegerField()


# ===== Sync =====
class SyncRequestSerializer(serializers.Serializer):
    actor_id = serializers.IntegerField(required=False, allow_null=True)


class SyncRowResultSerializer(serializers.Serializer):
    trainee_id = serializers.IntegerField()
    session_id = serializers.IntegerField()
    hours = serializers.DecimalField(max_digits=5, decimal_places=2)
    is_weekend = serializers.BooleanField()
    daily_rate = serializers.IntegerField()
    final_rate = serializers.IntegerField()
    created = serializers.BooleanField()
    error = serializers.CharField(allow_blank=True)


class SyncResultSerializer(serializers.Serializer):
    batch_id = serializers.IntegerField()
    synced = serializers.IntegerField()
    deleted = serializers.IntegerField()
    rows = SyncRowResultSerializer(many=True)


# ===== Override =====
class OverrideSerializer(serializers.Serializer):
    trainee_id = serializers.IntegerField()
    session_id = serializers.IntegerField()
    amount = serializers.IntegerField(min_value=0, allow_null=True)  # null clears the override
    actor_id = serializers.IntegerField(required=False, allow_null=True)


# ===== Totals =====
class TraineeTotalSerializer(serializers.Serializer):
    trainee_id = serializers.IntegerField()
    total = serializers.IntegerField()


class LedgerTotalsSerializer(serializers.Serializer):
    batch_id = serializers.IntegerField()
    total = serializers.IntegerField()
    by_trainee = TraineeTotalSerializer(many=True)
