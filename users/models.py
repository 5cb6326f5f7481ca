import secrets

from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager as BaseUserManager
from django.db import models
from django.urls import reverse
from django.utils import timezone


class UserManager(BaseUserManager):
    """Email-first manager; username falls back to the email address."""

    def create_user(self, email=None, password=None, username=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        email = self.normalize_email(email)
        return self._create_user(username or email, email, password, **extra_fields)

    def create_superuser(self, email=None, password=None, username=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.Role.ADMIN)
        email = self.normalize_email(email)
        return self._create_user(username or email, email, password, **extra_fields)


# -----------------------------
# Main user table
# -----------------------------
class User(AbstractUser):
    class Role(models.TextChoices):
        ADMIN = 'ADMIN', 'Admin'
        SERVICE_PROVIDER = 'SERVICE_PROVIDER', 'Service provider'
        USER = 'USER', 'User'

    email = models.EmailField(max_length=255, unique=True)
    name = models.CharField(max_length=150, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER, db_index=True)
    phone = models.CharField(max_length=20, blank=True)
    avatar = models.ImageField(upload_to='avatars/', null=True, blank=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    objects = UserManager()

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN

    @property
    def is_service_provider(self):
        return self.role == self.Role.SERVICE_PROVIDER

    @property
    def display_name(self):
        return self.name or self.email

    @property
    def dashboard_url(self):
        return reverse(ROLE_DASHBOARDS[self.role])


ROLE_DASHBOARDS = {
    'ADMIN': 'travel:admin_dashboard',
    'SERVICE_PROVIDER': 'travel:sp_dashboard',
    'USER': 'travel:user_dashboard',
}


# -----------------------------
# One-time password reset tokens
# -----------------------------
class PasswordResetToken(models.Model):
    email = models.EmailField(max_length=255, db_index=True)
    token = models.CharField(max_length=64, unique=True)
    expires = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    @classmethod
    def issue(cls, email):
        cls.objects.filter(email=email).delete()
        return cls.objects.create(
            email=email,
            token=secrets.token_hex(32),
            expires=timezone.now() + settings.PASSWORD_RESET_TOKEN_TTL,
        )

    @property
    def is_expired(self):
        return self.expires < timezone.now()

    def __str__(self):
        return f"Reset token for {self.email}"
