from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from .mixins import TimeStampedModel
from training_pay.services.settlement_fsm import DISBURSEMENT, CLAWBACK


class SettlementProcess(TimeStampedModel):
    machine = None

    note = models.TextField(blank=True, default="")
    bank_info = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        abstract = True

    @property
    def kind(self) -> str:
        return self.machine.kind

    @property
    def status_label(self) -> str:
        return self.machine.labels.get(self.status, self.status)

    @property
    def is_terminal(self) -> bool:
        return self.machine.is_terminal(self.status)

    def milestone_values(self) -> dict:
        return {name: getattr(self, name) for name in self.machine.milestones.values()}


class DisbursementProcess(SettlementProcess):
    machine = DISBURSEMENT

    batch = models.OneToOneField("training_pay.Batch", on_delete=models.CASCADE, related_name="disbursement")
    status = models.CharField(max_length=16, choices=DISBURSEMENT.choices, default=DISBURSEMENT.initial)
    title = models.CharField(max_length=200, blank=True, default="")
    amount = models.PositiveIntegerField(null=True, blank=True, help_text="Optional administrator-entered total")

    doc_approved_at = models.DateTimeField(null=True, blank=True)
    cms_draft_at = models.DateTimeField(null=True, blank=True)
    cms_approved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "DisbursementProcess"
        constraints = [
            models.CheckConstraint(name="disbursement_status_valid", condition=Q(status__in=DISBURSEMENT.stages)),
        ]

    def __str__(self):
        return f"DISB batch={self.batch_id} [{self.status}]"


class ClawbackProcess(SettlementProcess):
    machine = CLAWBACK

    batch = models.OneToOneField("training_pay.Batch", on_delete=models.CASCADE, related_name="clawback")
    status = models.CharField(max_length=20, choices=CLAWBACK.choices, default=CLAWBACK.initial)
    reason = models.TextField(blank=True, default="")
    compensation_refund = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])
    transport_refund = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])

    requested_at = models.DateTimeField(null=True, blank=True)
    deposit_confirmed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "ClawbackProcess"
        constraints = [
            models.CheckConstraint(name="clawback_status_valid", condition=Q(status__in=CLAWBACK.stages)),
        ]

    @property
    def refund_total(self) -> int:
        return int(self.compensation_refund or 0) + int(self.transport_refund or 0)

    def __str__(self):
        return f"CLAW batch={self.batch_id} [{self.status}]"
