from decimal import Decimal
from django.db import models
from django.db.models import Q, UniqueConstraint
from .mixins import TimeStampedModel


class CompensationRow(TimeStampedModel):
    trainee = models.ForeignKey("training_pay.Trainee", on_delete=models.CASCADE, related_name="compensation_rows")
    session = models.ForeignKey("training_pay.TrainingSession", on_delete=models.CASCADE, related_name="compensation_rows")

    training_hours = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    is_weekend = models.BooleanField(default=False)
    daily_rate = models.PositiveIntegerField(default=0, help_text="Computed amount before any override")
    override_rate = models.PositiveIntegerField(null=True, blank=True, help_text="Administrator-entered amount")
    sync_error = models.CharField(max_length=255, blank=True, default="")
    synced_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "CompensationRow"
        ordering = ["session__date", "session_id", "trainee_id"]
        constraints = [
            UniqueConstraint(fields=["trainee", "session"], name="uniq_compensation_trainee_session"),
            models.CheckConstraint(name="compensation_hours_non_negative", condition=Q(training_hours__gte=0)),
        ]

    @property
    def rate(self):
        from training_pay.services.rate_table import resolve
        return resolve(self.daily_rate, self.override_rate)

    @property
    def final_rate(self) -> int:
        return self.rate.amount

    @property
    def is_overridden(self) -> bool:
        return self.override_rate is not None

    def __str__(self):
        return f"COMP {self.trainee_id} @ {self.session_id} = {self.final_rate}"
