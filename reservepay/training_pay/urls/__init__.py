# training_pay/urls/__init__.py
from django.urls import path, include

urlpatterns = [
    path("ledger/", include("training_pay.urls.ledger_urls")),
    path("transport/", include("training_pay.urls.transport_urls")),
    path("settlement/", include("training_pay.urls.settlement_urls")),
    path("commuting/", include("training_pay.urls.commuting_urls")),
    path("attendance/", include("training_pay.urls.attendance_urls")),
]
