from django.db import models
from django.db.models import UniqueConstraint
from .mixins import TimeStampedModel


class TransportStatus(models.TextChoices):
    OK = "OK", "OK"
    NO_ADDRESS = "NO_ADDRESS", "No address on file"
    GEO_FAIL = "GEO_FAIL", "Address not found"
    ROUTE_FAIL = "ROUTE_FAIL", "Route not found"
    ERROR = "ERROR", "Unexpected error"


class TransportRecord(TimeStampedModel):
    Status = TransportStatus

    trainee = models.ForeignKey("training_pay.Trainee", on_delete=models.CASCADE, related_name="transport_records")
    batch = models.ForeignKey("training_pay.Batch", on_delete=models.CASCADE, related_name="transport_records")

    amount = models.PositiveIntegerField(default=0)
    address = models.CharField(max_length=255, blank=True, default="")
    distance_km = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    fuel_cost = models.PositiveIntegerField(null=True, blank=True)
    toll_cost = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(
        max_length=16, choices=TransportStatus.choices, default=TransportStatus.OK,
        help_text="Stored records are always OK; failure states appear only on calculation results",
    )
    is_manual = models.BooleanField(default=False, help_text="True while a hand-entered amount is authoritative")
    note = models.CharField(max_length=255, blank=True, default="")
    calculated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "TransportRecord"
        ordering = ["trainee__name", "id"]
        constraints = [
            UniqueConstraint(fields=["trainee", "batch"], name="uniq_transport_trainee_batch"),
        ]

    def __str__(self):
        return f"TRANS {self.trainee_id} @ {self.batch_id} = {self.amount} [{self.status}]"
