from django.urls import path, include
from rest_framework.routers import DefaultRouter
from training_pay.views.commuting_view import (
    CommutingCaptureView, CommutingManualView, CommutingRecordListView, CommutingSummaryView,
    GeoLocationViewSet,
)

router = DefaultRouter()
router.register(r"locations", GeoLocationViewSet, basename="geo-locations")

urlpatterns = [
    path("capture/", CommutingCaptureView.as_view(), name="commuting-capture"),
    path("manual/", CommutingManualView.as_view(), name="commuting-manual"),
    path("records/", CommutingRecordListView.as_view(), name="commuting-records"),
    path("batches/<int:batch_id>/summary/", CommutingSummaryView.as_view(), name="commuting-summary"),
    path("", include(router.urls)),
]
