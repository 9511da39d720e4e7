"""Tests for JWT token endpoints."""

import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory


@pytest.mark.django_db
class TestTokenObtain:
    url = "/api/v1/auth/token/"

    def test_returns_token_pair(self):
        user = UserFactory()

        response = APIClient().post(
            self.url,
            {"email": user.email, "password": "testpass123"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert set(response.json()) == {"access", "refresh"}

    def test_wrong_password(self):
        user = UserFactory()

        response = APIClient().post(
            self.url,
            {"email": user.email, "password": "wrong"},
            format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_access_token_authenticates_api_calls(self):
        user = UserFactory()
        client = APIClient()
        tokens = client.post(
            self.url,
            {"email": user.email, "password": "testpass123"},
            format="json",
        ).json()

        client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        response = client.get(reverse("orders:order-list"))

        assert response.status_code == status.HTTP_200_OK

    def test_refresh(self):
        user = UserFactory()
        client = APIClient()
        tokens = client.post(
            self.url,
            {"email": user.email, "password": "testpass123"},
            format="json",
        ).json()

        response = client.post(
            "/api/v1/auth/token/refresh/", {"refresh": tokens["refresh"]}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert "access" in response.json()
