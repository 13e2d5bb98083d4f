# services/urls.py
from django.urls import path
from .views import BalanceView, CatalogueView

urlpatterns = [
    path("catalogue/", CatalogueView.as_view(), name="catalogue"),
    path("balance/", BalanceView.as_view(), name="provider-balance"),
]
