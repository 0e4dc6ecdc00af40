from django.db import models
from django.db.models import UniqueConstraint
from .mixins import TimeStampedModel


class Unit(TimeStampedModel):
    name = models.CharField(max_length=120, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    class Meta:
        ordering = ["name"]
        db_table = "Unit"

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def __str__(self):
        return self.name


class Trainee(TimeStampedModel):
    name = models.CharField(max_length=120)
    rank = models.CharField(max_length=32, blank=True, default="")
    service_number = models.CharField(max_length=32, blank=True, default="", db_index=True)
    address = models.CharField(max_length=255, blank=True, default="")
    address_detail = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["name", "id"]
        db_table = "Trainee"

    @property
    def full_address(self) -> str:
        base = (self.address or "").strip()
        if not base:
            return ""
        detail = (self.address_detail or "").strip()
        return f"{base} {detail}" if detail else base

    def __str__(self):
        return f"{self.rank} {self.name}".strip()


class Batch(TimeStampedModel):
    class Status(models.TextChoices):
        PLANNED = "PLANNED", "Planned"
        ACTIVE = "ACTIVE", "Active"
        COMPLETED = "COMPLETED", "Completed"

    name = models.CharField(max_length=120)
    start_date = models.DateField()
    end_date = models.DateField()
    unit = models.ForeignKey(Unit, null=True, blank=True, on_delete=models.SET_NULL, related_name="batches")
    required_hours = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PLANNED)

    class Meta:
        ordering = ["-start_date", "-id"]
        db_table = "Batch"
        constraints = [
            models.CheckConstraint(name="batch_dates_valid", condition=models.Q(end_date__gte=models.F("start_date"))),
        ]

    def covers(self, day) -> bool:
        return self.start_date <= day <= self.end_date

    def __str__(self):
        return self.name


class BatchTrainee(TimeStampedModel):
    class Status(models.TextChoices):
        PRESENT = "PRESENT", "Present"
        ABSENT = "ABSENT", "Absent"
        PENDING = "PENDING", "Pending"

    batch = models.ForeignKey(Batch, on_delete=models.CASCADE, related_name="assignments")
    trainee = models.ForeignKey(Trainee, on_delete=models.CASCADE, related_name="assignments")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)

    class Meta:
        db_table = "BatchTrainee"
        constraints = [
            UniqueConstraint(fields=["batch", "trainee"], name="uniq_batch_trainee"),
        ]

    def __str__(self):
        return f"{self.batch_id}:{self.trainee_id} [{self.status}]"
