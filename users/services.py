"""
Account management: admin user edits, invitations and password resets.
"""
import logging
import secrets

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.db.models import Count, Q
from django.template.loader import render_to_string
from django.urls import reverse
from django.utils.html import strip_tags
from rest_framework.exceptions import NotFound, ValidationError

from .models import PasswordResetToken, User

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account with that email exists, we've sent a password reset link."
MIN_PASSWORD_LENGTH = 6


def send_html_email(subject, template, context, to):
    html_message = render_to_string(template, context)
    plain_message = strip_tags(html_message)
    msg = EmailMultiAlternatives(subject, plain_message, settings.DEFAULT_FROM_EMAIL, [to])
    msg.attach_alternative(html_message, "text/html")
    msg.send()


def role_label(role):
    return role.lower().replace('_', ' ')


# ----------------------------------------------------------------------
# Admin user management
# ----------------------------------------------------------------------
def user_queryset(search=None, role=None):
    qs = User.objects.annotate(
        destination_count=Count('destinations', distinct=True),
        comment_count=Count('comments', distinct=True),
    ).order_by('-date_joined')
    if search:
        qs = qs.filter(Q(email__icontains=search) | Q(name__icontains=search))
    if role:
        qs = qs.filter(role=role)
    return qs


def get_user(user_id):
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise NotFound("User not found")
    return user


def update_user(actor, user, name=None, role=None):
    if role is not None and role not in User.Role.values:
        raise ValidationError("Invalid role")
    if role is not None and user.pk == actor.pk and role != user.role:
        raise ValidationError("You cannot change your own role")

    if name is not None:
        user.name = name.strip()
    if role is not None:
        user.role = role
    user.save(update_fields=['name', 'role'])
    logger.info("User %s updated by %s (role=%s)", user.pk, actor.email, user.role)
    return user


def delete_user(actor, user):
    """Delete ``user`` with everything they own; returns counts of the removed rows."""
    if user.pk == actor.pk:
        raise ValidationError("You cannot delete your own account")

    deleted = {
        'destinations': user.destinations.count(),
        'comments': user.comments.count(),
        'likes': user.likes.count(),
        'views': user.views.count(),
    }
    label = user.name or user.email
    user.delete()
    logger.info("User %s deleted by %s", label, actor.email)
    return label, deleted


# ----------------------------------------------------------------------
# Invitations
# ----------------------------------------------------------------------
def invite_user(email, role, name=None, message=None):
    """
    Create an account with a temporary password and email the credentials.

    Returns ``(user, email_sent)``; the account survives a failed delivery.
    """
    email = User.objects.normalize_email((email or '').strip()).lower()
    if not email or not role:
        raise ValidationError("Email and role are required")
    if role not in User.Role.values:
        raise ValidationError("Invalid role")
    if User.objects.filter(email__iexact=email).exists():
        raise ValidationError("User with this email already exists")

    temp_password = secrets.token_urlsafe(6)[:8]
    user = User.objects.create_user(email=email, password=temp_password, name=name or '', role=role)
    logger.info("Invited %s as %s", email, role)

    try:
        send_html_email(
            "Welcome to Sustainable Tourism Platform",
            'users/emails/invite.html',
            {
                'name': name,
                'email': email,
                'temp_password': temp_password,
                'role': role_label(role),
                'message': message,
                'signin_url': settings.SITE_URL + reverse('users:signin'),
            },
            email,
        )
    except Exception:
        logger.exception("Error sending invitation email to %s", email)
        return user, False
    return user, True


# ----------------------------------------------------------------------
# Password reset
# ----------------------------------------------------------------------
def request_password_reset(email):
    email = (email or '').strip()
    if not email:
        raise ValidationError("Email is required")

    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        return RESET_REQUESTED_MESSAGE

    reset = PasswordResetToken.issue(user.email)
    reset_url = f"{settings.SITE_URL}{reverse('users:reset_password')}?token={reset.token}"
    try:
        send_html_email(
            "Reset your password",
            'users/emails/password_reset.html',
            {'user': user, 'reset_url': reset_url},
            user.email,
        )
    except Exception:
        logger.exception("Error sending password reset email to %s", user.email)
    else:
        logger.info("Password reset link sent to %s", user.email)
    return RESET_REQUESTED_MESSAGE


def reset_password(token, password):
    if not token or not password:
        raise ValidationError("Token and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    reset = PasswordResetToken.objects.filter(token=token).first()
    if reset is None:
        raise ValidationError("Invalid or expired reset token")
    if reset.is_expired:
        reset.delete()
        raise ValidationError("Reset token has expired")

    user = User.objects.filter(email__iexact=reset.email).first()
    if user is None:
        raise NotFound("User not found")

    user.set_password(password)
    user.save(update_fields=['password'])
    PasswordResetToken.objects.filter(email=reset.email).delete()
    logger.info("Password reset for %s", user.email)
    return user
