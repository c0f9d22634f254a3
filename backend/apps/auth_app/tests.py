"""
Tests for profiles and the auth endpoints
"""
from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework.test import APIClient

from apps.auth_app.models import Profile


class ProfileSignalTests(TestCase):
    """Profiles are created alongside login accounts"""

    def test_profile_created_with_user(self):
        user = User.objects.create_user(
            username="grace",
            email="grace@example.com",
            password="secret-pass",
            first_name="Grace",
            last_name="Hopper",
        )

        profile = Profile.objects.get(user=user)
        self.assertEqual(profile.email, "grace@example.com")
        self.assertEqual(profile.first_name, "Grace")
        self.assertEqual(profile.last_name, "Hopper")

    def test_profile_without_account(self):
        profile = Profile.objects.create(email="invited@example.com")
        self.assertIsNone(profile.user)
        self.assertEqual(str(profile), "invited@example.com")


class AuthEndpointTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="grace", email="grace@example.com", password="secret-pass")

    def test_login_with_email_and_fetch_profile(self):
        response = self.client.post(
            '/api/auth/token/',
            {'email': "GRACE@example.com", 'password': "secret-pass"},
            format='json',
        )
        self.assertEqual(response.status_code, 200)
        access = response.data['access']

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        me = self.client.get('/api/auth/me/')

        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.data['id'], str(self.user.profile.id))

    def test_wrong_password(self):
        response = self.client.post(
            '/api/auth/token/',
            {'email': "grace@example.com", 'password': "nope"},
            format='json',
        )
        self.assertEqual(response.status_code, 400)

    def test_me_requires_auth(self):
        self.assertEqual(self.client.get('/api/auth/me/').status_code, 401)
