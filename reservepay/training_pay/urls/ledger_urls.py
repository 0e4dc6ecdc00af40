from django.urls import path
from training_pay.views.ledger_view import (
    LedgerSyncView, LedgerRowsView, LedgerOverviewView, LedgerTotalsView, LedgerOverrideView,
)

urlpatterns = [
    path("override/", LedgerOverrideView.as_view(), name="ledger-override"),
    path("batches/<int:batch_id>/", LedgerRowsView.as_view(), name="ledger-rows"),
    path("batches/<int:batch_id>/sync/", LedgerSyncView.as_view(), name="ledger-sync"),
    path("batches/<int:batch_id>/overview/", LedgerOverviewView.as_view(), name="ledger-overview"),
    path("batches/<int:batch_id>/totals/", LedgerTotalsView.as_view(), name="ledger-totals"),
]
