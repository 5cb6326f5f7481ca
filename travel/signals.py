import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from .cache_utils import invalidate_cache
from .models import Destination
from .services.catalog import CATEGORY_TREE_KEY

logger = logging.getLogger(__name__)

# Sent after an admin approves or rejects a pending destination
destination_reviewed = Signal()


@receiver(destination_reviewed)
def send_review_email(sender, destination, reviewer, **kwargs):
    owner = destination.created_by
    # No mail about a reviewer's own destination
    if not owner.email or owner.pk == reviewer.pk:
        return

    subject = f"Your destination \"{destination.name}\" was {destination.get_status_display().lower()}"
    html_message = render_to_string('travel/emails/destination_reviewed.html', {
        'destination': destination,
        'owner': owner,
        'site_url': settings.SITE_URL,
    })
    plain_message = strip_tags(html_message)

    msg = EmailMultiAlternatives(
        subject, plain_message, settings.DEFAULT_FROM_EMAIL, [owner.email]
    )
    msg.attach_alternative(html_message, "text/html")
    try:
        msg.send()
    except Exception:
        logger.exception("Could not send review email for destination %s", destination.pk)


@receiver(post_save, sender=Destination)
@receiver(post_delete, sender=Destination)
def refresh_category_counts(sender, instance, **kwargs):
    invalidate_cache(keys=[CATEGORY_TREE_KEY])
