from django.urls import path
from training_pay.views.attendance_view import AttendanceSummaryView

urlpatterns = [
    path("batches/<int:batch_id>/summary/", AttendanceSummaryView.as_view(), name="attendance-summary"),
]
