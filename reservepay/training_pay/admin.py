from django.contrib import admin
from .models import (
    Unit, Trainee, Batch, BatchTrainee,
    TrainingSession, AttendanceOutcome,
    CompensationRow, TransportRecord,
    DisbursementProcess, ClawbackProcess,
    GeoReferenceLocation, CommutingRecord,
    AuditLog,
)


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ("name", "address", "latitude", "longitude")
    search_fields = ("name", "address")


@admin.register(Trainee)
class TraineeAdmin(admin.ModelAdmin):
    list_display = ("name", "rank", "service_number", "address")
    search_fields = ("name", "service_number")


class BatchTraineeInline(admin.TabularInline):
    model = BatchTrainee
    extra = 0


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ("name", "start_date", "end_date", "unit", "status")
    list_filter = ("status",)
    search_fields = ("name",)
    inlines = [BatchTraineeInline]


@admin.register(TrainingSession)
class TrainingSessionAdmin(admin.ModelAdmin):
    list_display = ("title", "batch", "date", "start_time", "end_time", "lunch_window", "counts_toward_hours")
    list_filter = ("counts_toward_hours", "attendance_enabled", "lunch_window")
    search_fields = ("title", "category")


@admin.register(AttendanceOutcome)
class AttendanceOutcomeAdmin(admin.ModelAdmin):
    list_display = ("trainee", "session", "status")
    list_filter = ("status",)


@admin.register(CompensationRow)
class CompensationRowAdmin(admin.ModelAdmin):
    list_display = ("trainee", "session", "training_hours", "is_weekend", "daily_rate", "override_rate", "sync_error")
    list_filter = ("is_weekend",)
    search_fields = ("trainee__name",)


@admin.register(TransportRecord)
class TransportRecordAdmin(admin.ModelAdmin):
    list_display = ("trainee", "batch", "amount", "distance_km", "status", "is_manual")
    list_filter = ("status", "is_manual")
    search_fields = ("trainee__name", "address")


@admin.register(DisbursementProcess)
class DisbursementProcessAdmin(admin.ModelAdmin):
    list_display = ("batch", "status", "title", "doc_approved_at", "cms_draft_at", "cms_approved_at")
    list_filter = ("status",)


@admin.register(ClawbackProcess)
class ClawbackProcessAdmin(admin.ModelAdmin):
    list_display = ("batch", "status", "compensation_refund", "transport_refund", "requested_at", "completed_at")
    list_filter = ("status",)


@admin.register(GeoReferenceLocation)
class GeoReferenceLocationAdmin(admin.ModelAdmin):
    list_display = ("name", "latitude", "longitude", "radius_m", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)


@admin.register(CommutingRecord)
class CommutingRecordAdmin(admin.ModelAdmin):
    list_display = ("trainee", "date", "check_in_at", "check_out_at", "is_manual", "batch")
    list_filter = ("is_manual",)
    search_fields = ("trainee__name",)


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("action", "object_type", "object_id", "actor", "created_at")
    search_fields = ("action", "object_type", "object_id")
