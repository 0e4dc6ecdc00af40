from django.db import models
from django.db.models import Q, UniqueConstraint
from .mixins import TimeStampedModel


class GeoReferenceLocation(TimeStampedModel):
    name = models.CharField(max_length=120)
    latitude = models.DecimalField(max_digits=9, decimal_places=6)
    longitude = models.DecimalField(max_digits=9, decimal_places=6)
    radius_m = models.PositiveIntegerField(default=200)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        db_table = "GeoReferenceLocation"
        indexes = [models.Index(fields=["is_active"])]

    def __str__(self):
        return f"{self.name} ({self.radius_m}m)"


class CommutingRecord(TimeStampedModel):
    trainee = models.ForeignKey("training_pay.Trainee", on_delete=models.CASCADE, related_name="commuting_records")
    batch = models.ForeignKey("training_pay.Batch", null=True, blank=True, on_delete=models.SET_NULL, related_name="commuting_records")
    date = models.DateField(db_index=True)

    check_in_at = models.DateTimeField(null=True, blank=True)
    check_out_at = models.DateTimeField(null=True, blank=True)
    check_in_lat = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    check_in_lng = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    check_out_lat = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    check_out_lng = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    check_in_location = models.ForeignKey(GeoReferenceLocation, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")
    check_out_location = models.ForeignKey(GeoReferenceLocation, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")

    is_manual = models.BooleanField(default=False)
    note = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "CommutingRecord"
        ordering = ["-date", "trainee_id"]
        constraints = [
            UniqueConstraint(fields=["trainee", "date"], name="uniq_commuting_trainee_day"),
            models.CheckConstraint(
                name="commuting_out_after_in",
                condition=Q(check_out_at__isnull=True) | Q(check_in_at__isnull=True) | Q(check_out_at__gte=models.F("check_in_at")),
            ),
        ]

    @property
    def is_open(self) -> bool:
        return self.check_in_at is not None and self.check_out_at is None

    def __str__(self):
        return f"COMMUTE {self.trainee_id} {self.date}"
