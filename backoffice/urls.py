# backoffice/urls.py
from django.urls import path
from .views import (
    AdminOrderDeleteView,
    AdminOrderRefreshView,
    AdminOrdersView,
    AdminSummaryView,
    AdminUsersView,
    ToggleViewView,
)

urlpatterns = [
    path("toggle/", ToggleViewView.as_view(), name="backoffice-toggle"),
    path("summary/", AdminSummaryView.as_view(), name="backoffice-summary"),
    path("users/", AdminUsersView.as_view(), name="backoffice-users"),
    path("orders/", AdminOrdersView.as_view(), name="backoffice-orders"),
    path("orders/<str:order_id>/", AdminOrderDeleteView.as_view(), name="backoffice-order-delete"),
    path("orders/<str:order_id>/refresh/", AdminOrderRefreshView.as_view(), name="backoffice-order-refresh"),
]
