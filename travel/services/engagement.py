"""
Likes, comments and view tracking on destinations.
"""
import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Avg, F
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from ..models import Comment, Destination, Like, View

logger = logging.getLogger(__name__)


def client_ip(request):
    """First address of X-Forwarded-For, then X-Real-IP, then the socket peer."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('HTTP_X_REAL_IP') or request.META.get('REMOTE_ADDR') or 'unknown'


# ----------------------------------------------------------------------
# Likes
# ----------------------------------------------------------------------
def like_count(destination):
    return Like.objects.filter(destination=destination).count()


def toggle_like(user, destination):
    """Like the destination, or unlike it when already liked."""
    with transaction.atomic():
        deleted, _ = Like.objects.filter(destination=destination, user=user).delete()
        liked = not deleted
        if liked:
            Like.objects.create(destination=destination, user=user)
    return {'liked': liked, 'like_count': like_count(destination)}


def unlike(user, destination):
    deleted, _ = Like.objects.filter(destination=destination, user=user).delete()
    if not deleted:
        raise ValidationError("Not liked")
    return {'liked': False, 'like_count': like_count(destination)}


def has_liked(user, destination):
    if user is None or not user.is_authenticated:
        return False
    return Like.objects.filter(destination=destination, user=user).exists()


# ----------------------------------------------------------------------
# Comments
# ----------------------------------------------------------------------
def _parse_rating(rating):
    if rating in (None, ''):
        return None
    try:
        value = int(rating)
    except (TypeError, ValueError):
        raise ValidationError("Rating must be a number between 1 and 5")
    if not 1 <= value <= 5:
        raise ValidationError("Rating must be a number between 1 and 5")
    return value


def refresh_rating(destination):
    average = destination.comments.filter(rating__isnull=False).aggregate(avg=Avg('rating'))['avg']
    destination.rating = round(average or 0.0, 2)
    destination.save(update_fields=['rating'])
    return destination.rating


def add_comment(user, destination, content, rating=None):
    content = (content or '').strip()
    if not content:
        raise ValidationError("Content is required")
    rating = _parse_rating(rating)

    if Comment.objects.filter(destination=destination, user=user).exists():
        raise ValidationError("You have already commented on this destination")

    try:
        with transaction.atomic():
            comment = Comment.objects.create(
                destination=destination,
                user=user,
                content=content,
                rating=rating,
            )
    except IntegrityError:
        raise ValidationError("You have already commented on this destination")

    if rating is not None:
        refresh_rating(destination)
    logger.info("Comment %s added to destination %s", comment.pk, destination.pk)
    return comment


# ----------------------------------------------------------------------
# Views
# ----------------------------------------------------------------------
def record_view(request, destination):
    """
    Count a view unless the same viewer saw the destination recently.

    Signed-in viewers are matched by user, anonymous ones by client IP.
    """
    user = request.user if request.user.is_authenticated else None
    since = timezone.now() - settings.VIEW_DEDUP_WINDOW
    ip_address = client_ip(request)

    recent = View.objects.filter(destination=destination, created_at__gte=since)
    recent = recent.filter(user=user) if user else recent.filter(user__isnull=True, ip_address=ip_address)
    if recent.exists():
        return {'view_count': destination.view_count, 'already_viewed': True}

    with transaction.atomic():
        View.objects.create(
            destination=destination,
            user=user,
            ip_address=None if user else ip_address,
            user_agent=None if user else request.META.get('HTTP_USER_AGENT', 'unknown')[:255],
        )
        Destination.objects.filter(pk=destination.pk).update(view_count=F('view_count') + 1)
    destination.refresh_from_db(fields=['view_count'])
    return {'view_count': destination.view_count, 'already_viewed': False}
