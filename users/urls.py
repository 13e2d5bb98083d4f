# users/urls.py

from django.urls import path
from .views import LoginView, LogoutView, MeView, RefreshView, RegisterView

urlpatterns = [
    path('me/',       MeView.as_view(),       name='user-me'),
    path('register/', RegisterView.as_view(), name='user-register'),
    path('login/',    LoginView.as_view(),    name='user-login'),
    path('logout/',   LogoutView.as_view(),   name='user-logout'),
    path('refresh/',  RefreshView.as_view(),  name='user-refresh'),
]
