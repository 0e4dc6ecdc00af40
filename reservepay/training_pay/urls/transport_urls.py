from django.urls import path
from training_pay.views.transport_view import (
    TransportRecordListView, TransportCalculateView, TransportCommitView, TransportManualView,
)

urlpatterns = [
    path("batches/<int:batch_id>/", TransportRecordListView.as_view(), name="transport-records"),
    path("batches/<int:batch_id>/calculate/", TransportCalculateView.as_view(), name="transport-calculate"),
    path("batches/<int:batch_id>/commit/", TransportCommitView.as_view(), name="transport-commit"),
    path("batches/<int:batch_id>/manual/", TransportManualView.as_view(), name="transport-manual"),
]
