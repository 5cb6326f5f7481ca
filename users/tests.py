"""
Unit tests for Users app
Test coverage for registration, login, password reset and admin user management
"""
from datetime import timedelta
from unittest.mock import patch

from django.core import mail
from django.test import TestCase, Client
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework import status

from travel.models import Category, Comment, Destination
from .models import PasswordResetToken, User


class UserModelTest(TestCase):
    """Test User model"""

    def setUp(self):
        self.user = User.objects.create_user(
            email='Test@Example.com',
            password='testpass123'
        )

    def test_user_creation(self):
        """Test creating a user with email only"""
        self.assertEqual(self.user.email, 'Test@example.com')
        self.assertEqual(self.user.username, 'Test@example.com')
        self.assertEqual(self.user.role, User.Role.USER)
        self.assertTrue(self.user.check_password('testpass123'))

    def test_dashboard_url(self):
        """Test each role gets its own dashboard"""
        self.assertEqual(self.user.dashboard_url, '/user/dashboard/')
        self.user.role = User.Role.SERVICE_PROVIDER
        self.assertEqual(self.user.dashboard_url, '/sp/dashboard/')

    def test_superuser_is_admin(self):
        """Test superusers get the admin role"""
        admin = User.objects.create_superuser(email='root@example.com', password='testpass123')
        self.assertTrue(admin.is_admin)


class AuthAPITest(TestCase):
    """Test registration and login endpoints"""

    def setUp(self):
        self.client = APIClient()

    def test_register(self):
        """Test registration creates a USER and returns tokens"""
        response = self.client.post('/api/auth/register', {
            'email': 'new@example.com',
            'password': 'secret123',
            'name': 'New Traveller',
            'role': 'ADMIN',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data['tokens'])
        self.assertEqual(response.data['user']['role'], 'USER')

    def test_register_duplicate_email(self):
        """Test duplicate email is rejected case-insensitively"""
        User.objects.create_user(email='taken@example.com', password='secret123')
        response = self.client.post('/api/auth/register', {
            'email': 'TAKEN@example.com',
            'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('already exists', response.data['error'])

    def test_register_short_password(self):
        """Test minimum password length"""
        response = self.client.post('/api/auth/register', {
            'email': 'short@example.com',
            'password': '123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login(self):
        """Test login returns tokens and role dashboard"""
        User.objects.create_user(
            email='sp@example.com', password='secret123', role=User.Role.SERVICE_PROVIDER
        )
        response = self.client.post('/api/auth/login', {
            'email': 'sp@example.com',
            'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['redirect'], '/sp/dashboard/')
        self.assertIn('refresh', response.data['tokens'])

    def test_login_wrong_password(self):
        """Test bad credentials are 401"""
        User.objects.create_user(email='user@example.com', password='secret123')
        response = self.client.post('/api/auth/login', {
            'email': 'user@example.com',
            'password': 'wrong',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], "Invalid email or password")

    def test_login_missing_fields(self):
        """Test missing fields are 400"""
        response = self.client.post('/api/auth/login', {'email': 'user@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_logout_blacklists_refresh(self):
        """Test refresh token cannot be reused after logout"""
        User.objects.create_user(email='user@example.com', password='secret123')
        login = self.client.post('/api/auth/login', {
            'email': 'user@example.com',
            'password': 'secret123',
        }, format='json')
        tokens = login.data['tokens']
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = self.client.post('/api/auth/logout', {'refresh': tokens['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post('/api/auth/logout', {'refresh': tokens['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PasswordResetTest(TestCase):
    """Test forgot / reset password flow"""

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email='user@example.com', password='oldpass123')

    def test_unknown_email_gets_same_message(self):
        """Test no account enumeration"""
        known = self.client.post('/api/auth/forgot-password', {'email': 'user@example.com'}, format='json')
        unknown = self.client.post('/api/auth/forgot-password', {'email': 'nobody@example.com'}, format='json')
        self.assertEqual(known.data['message'], unknown.data['message'])
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(PasswordResetToken.objects.count(), 1)

    def test_reset_password(self):
        """Test token resets password once"""
        reset = PasswordResetToken.issue(self.user.email)
        response = self.client.post('/api/auth/reset-password', {
            'token': reset.token,
            'password': 'newpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newpass123'))

        response = self.client.post('/api/auth/reset-password', {
            'token': reset.token,
            'password': 'another123',
        }, format='json')
        self.assertEqual(response.data['error'], "Invalid or expired reset token")

    def test_expired_token(self):
        """Test expired tokens are removed"""
        reset = PasswordResetToken.objects.create(
            email=self.user.email, token='abc', expires=timezone.now() - timedelta(minutes=1)
        )
        response = self.client.post('/api/auth/reset-password', {
            'token': reset.token,
            'password': 'newpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "Reset token has expired")
        self.assertFalse(PasswordResetToken.objects.exists())

    def test_short_password(self):
        """Test reset enforces minimum length"""
        reset = PasswordResetToken.issue(self.user.email)
        response = self.client.post('/api/auth/reset-password', {
            'token': reset.token,
            'password': '123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AdminUserAPITest(TestCase):
    """Test admin user management endpoints"""

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='secret123', role=User.Role.ADMIN
        )
        self.user = User.objects.create_user(email='user@example.com', password='secret123', name='Alice')
        self.client.force_authenticate(user=self.admin)

    def test_list_users(self):
        """Test paginated user list with role filter"""
        response = self.client.get('/api/admin/users', {'role': 'USER'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u['email'] for u in response.data['users']], ['user@example.com'])

    def test_non_admin_forbidden(self):
        """Test users cannot manage users"""
        self.client.force_authenticate(user=self.user)
        response = self.client.get('/api/admin/users')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_role(self):
        """Test admin changes a role"""
        response = self.client.put(f'/api/admin/users/{self.user.pk}', {
            'role': 'SERVICE_PROVIDER',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, User.Role.SERVICE_PROVIDER)

    def test_cannot_change_own_role(self):
        """Test admins cannot demote themselves"""
        response = self.client.put(f'/api/admin/users/{self.admin.pk}', {'role': 'USER'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "You cannot change your own role")

    def test_invalid_role(self):
        """Test unknown roles are rejected"""
        response = self.client.put(f'/api/admin/users/{self.user.pk}', {'role': 'OWNER'}, format='json')
        self.assertEqual(response.data['error'], "Invalid role")

    def test_delete_user_reports_counts(self):
        """Test deletion cascades and reports removed rows"""
        category = Category.objects.create(name="Eco Tours")
        destination = Destination.objects.create(
            name="Lake Walk", category=category, created_by=self.admin, status=Destination.Status.APPROVED
        )
        Comment.objects.create(destination=destination, user=self.user, content='Nice')

        response = self.client.delete(f'/api/admin/users/{self.user.pk}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['deleted_data']['comments'], 1)
        self.assertFalse(User.objects.filter(pk=self.user.pk).exists())
        self.assertFalse(Comment.objects.exists())

    def test_cannot_delete_self(self):
        """Test admins cannot delete their own account"""
        response = self.client.delete(f'/api/admin/users/{self.admin.pk}')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invite_user(self):
        """Test invitation creates the account and sends credentials"""
        response = self.client.post('/api/admin/users/invite', {
            'email': 'guide@example.com',
            'role': 'SERVICE_PROVIDER',
            'name': 'Guide',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('warning', response.data)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['guide@example.com'])
        self.assertTrue(User.objects.filter(email='guide@example.com', role='SERVICE_PROVIDER').exists())

    @patch('users.services.send_html_email', side_effect=ConnectionRefusedError('smtp down'))
    def test_invite_email_failure_keeps_user(self, mock_send):
        """Test failed delivery still creates the account"""
        response = self.client.post('/api/admin/users/invite', {
            'email': 'guide@example.com',
            'role': 'USER',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['warning'], "Email delivery failed")
        self.assertTrue(User.objects.filter(email='guide@example.com').exists())

    def test_invite_existing_email(self):
        """Test invitation for an existing email fails"""
        response = self.client.post('/api/admin/users/invite', {
            'email': 'user@example.com',
            'role': 'USER',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AuthPageTest(TestCase):
    """Test sign-in and sign-up pages"""

    def setUp(self):
        self.client = Client()
        User.objects.create_user(email='user@example.com', password='secret123')

    def test_signin_page_loads(self):
        """Test sign-in page renders"""
        response = self.client.get('/auth/signin/')
        self.assertEqual(response.status_code, 200)

    def test_signin_redirects_to_dashboard(self):
        """Test successful sign-in lands on the role dashboard"""
        response = self.client.post('/auth/signin/', {
            'email': 'user@example.com',
            'password': 'secret123',
        })
        self.assertRedirects(response, '/user/dashboard/')

    def test_signin_wrong_password(self):
        """Test failed sign-in stays on the page"""
        response = self.client.post('/auth/signin/', {
            'email': 'user@example.com',
            'password': 'nope',
        })
        self.assertEqual(response.status_code, 200)
        self.assertFalse('_auth_user_id' in self.client.session)
