from django.urls import path
from training_pay.views.settlement_view import (
    SettlementSummaryView, SettlementCreateView, SettlementDetailView,
    SettlementAdvanceView, SettlementRevertView,
)

urlpatterns = [
    path("batches/<int:batch_id>/", SettlementSummaryView.as_view(), name="settlement-summary"),
    path("<str:kind>/", SettlementCreateView.as_view(), name="settlement-create"),
    path("<str:kind>/<int:pk>/", SettlementDetailView.as_view(), name="settlement-detail"),
    path("<str:kind>/<int:pk>/advance/", SettlementAdvanceView.as_view(), name="settlement-advance"),
    path("<str:kind>/<int:pk>/revert/", SettlementRevertView.as_view(), name="settlement-revert"),
]
