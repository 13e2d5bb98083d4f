# orders/urls.py
from django.urls import path
from .views import (
    OrderBackView,
    OrderDetailView,
    OrderDraftView,
    OrderListView,
    OrderRefreshAllView,
    OrderRefreshView,
    OrderResetView,
    OrderSubmitView,
    OrderVerifyView,
)

urlpatterns = [
    path("", OrderListView.as_view(), name="order-list"),
    path("draft/", OrderDraftView.as_view(), name="order-draft"),
    path("submit/", OrderSubmitView.as_view(), name="order-submit"),
    path("back/", OrderBackView.as_view(), name="order-back"),
    path("verify/", OrderVerifyView.as_view(), name="order-verify"),
    path("reset/", OrderResetView.as_view(), name="order-reset"),
    path("refresh/", OrderRefreshAllView.as_view(), name="order-refresh-all"),
    path("<str:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("<str:order_id>/refresh/", OrderRefreshView.as_view(), name="order-refresh"),
]
