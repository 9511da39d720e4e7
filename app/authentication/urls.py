"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/token/          - Obtain JWT access/refresh pair (POST)
    /api/v1/auth/token/refresh/  - Refresh an access token (POST)

Account management (registration, profile, password reset) is handled
outside this service; it only issues tokens for existing users.
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

app_name = "authentication"

urlpatterns = [
    path("token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
]
