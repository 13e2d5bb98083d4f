# payments/urls.py
from django.urls import path
from .views import FundsAmountView, FundsBackView, FundsMethodView, FundsSubmitView, FundsView

urlpatterns = [
    path("", FundsView.as_view(), name="funds"),
    path("method/", FundsMethodView.as_view(), name="funds-method"),
    path("amount/", FundsAmountView.as_view(), name="funds-amount"),
    path("back/", FundsBackView.as_view(), name="funds-back"),
    path("submit/", FundsSubmitView.as_view(), name="funds-submit"),
]
