# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import serializers
from training_pay.models import ClawbackProcess, DisbursementProcess


class DisbursementReadSerializer(serializers.ModelSerializer):
    kind = serializers.CharField(read_only=True)
    status_label = serializers.CharField(read_only=True)
    is_terminal = serializers.BooleanField(read_only=True)

    class Meta:
        model = DisbursementProcess
        fields = [
            "id", "kind", "batch_id", "status", "status_label", "is_terminal",
            "title", "amount", "bank_info", "note",
            "doc_approved_at", "cms_draft_at", "cms_approved_at",
            "created_at", "updated_at",
        ]


class ClawbackReadSerializer(serializers.ModelSerializer):
    kind = serializers.CharField(read_only=True)
    status_label = serializers.CharField(read_only=True)
    is_terminal = serializers.BooleanField(read_only=True)
    refund_total = serializers.IntegerField(read_only=True)

    class Meta:
        model = ClawbackProcess
        fields = [
            "id", "kind", "batch_id", "status", "status_label", "is_terminal",
            "reason", "bank_info", "note", "compensation_refund", "transport_refund", "refund_total",
            "requested_at", "deposit_confirmed_at", "completed_at",
            "created_at", "updated_at",
        ]


def read_serializer_for(process):
    if isinstance(process, ClawbackProcess):
        return ClawbackReadSerializer(process)
    return DisbursementReadSerializer(process)


# ===== Writes =====
class ActorSerializer(serializers.Serializer):
    actor_id = serializers.IntegerField(required=False, allow_null=True)


class MetadataSerializer(serializers.Serializer):
    """Union of editable fields; the service rejects fields that do not belong to the kind."""
    title = serializers.CharField(required=False, allow_blank=True, max_length=200)
    amount = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    bank_info = serializers.CharField(required=False, allow_blank=True, max_length=255)
    note = serializers.CharField(required=False, allow_blank=True)
    reason = serializers.CharField(required=False, allow_blank=True)
    compensation_refund = serializers.IntegerField(required=False, min_value=0)
    transport_refund = serializers.IntegerField(required=False, min_value=0)
    actor_id = serializers.IntegerField(required=False, allow_null=True)


class CreateProcessSerializer(MetadataSerializer):
    batch_id = serializers.IntegerField()


class SettlementSummarySerializer(serializers.Serializer):
    batch_id = serializers.IntegerField()
    disbursement = DisbursementReadSerializer(allow_null=True)
    clawback = ClawbackReadSerializer(allow_null=True)
    compensation_total = serializers.IntegerField()
    transport_total = serializers.IntegerField()
    ledger_total = serializers.IntegerField()
    refund_total = serializers.IntegerField()
    net = serializers.IntegerField()
