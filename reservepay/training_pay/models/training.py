from django.db import models
from django.db.models import UniqueConstraint
from .mixins import TimeStampedModel


class TrainingSession(TimeStampedModel):
    class LunchWindow(models.TextChoices):
        STANDARD = "STANDARD", "Standard lunch"
        EARLY = "EARLY", "Early (brunch-day) lunch"
        NONE = "NONE", "No lunch deduction"

    batch = models.ForeignKey("training_pay.Batch", on_delete=models.CASCADE, related_name="sessions")
    title = models.CharField(max_length=200)
    category = models.CharField(max_length=64, blank=True, default="")
    date = models.DateField(db_index=True)
    # "HH:MM" kept as text; a malformed value is reported by the ledger sync instead of blocking the save
    start_time = models.CharField(max_length=5, null=True, blank=True)
    end_time = models.CharField(max_length=5, null=True, blank=True)
    lunch_window = models.CharField(max_length=16, choices=LunchWindow.choices, default=LunchWindow.STANDARD)
    counts_toward_hours = models.BooleanField(default=True, help_text="False for meals and other non-billable blocks")
    attendance_enabled = models.BooleanField(default=True)

    class Meta:
        ordering = ["date", "start_time", "id"]
        db_table = "TrainingSession"
        indexes = [models.Index(fields=["batch", "date"])]

    def __str__(self):
        return f"{self.date} {self.title}"


class AttendanceOutcome(TimeStampedModel):
    class Status(models.TextChoices):
        PRESENT = "PRESENT", "Present"
        ABSENT = "ABSENT", "Absent"
        PENDING = "PENDING", "Pending"

    trainee = models.ForeignKey("training_pay.Trainee", on_delete=models.CASCADE, related_name="attendances")
    session = models.ForeignKey(TrainingSession, on_delete=models.CASCADE, related_name="attendances")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    reason = models.TextField(blank=True, default="")
    early_departure_time = models.CharField(max_length=5, null=True, blank=True)

    class Meta:
        db_table = "AttendanceOutcome"
        constraints = [
            UniqueConstraint(fields=["trainee", "session"], name="uniq_attendance_trainee_session"),
        ]

    def __str__(self):
        return f"ATTD {self.trainee_id} @ {self.session_id} [{self.status}]"
