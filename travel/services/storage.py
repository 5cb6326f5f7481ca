"""
Image uploads for destinations.

Files land in ``default_storage`` under ``destinations/<timestamp>-<name>``.
"""
import logging
import re
import time

from django.conf import settings
from django.core.files.storage import default_storage
from rest_framework.exceptions import ValidationError

logger = logging.getLogger(__name__)

UPLOAD_FOLDER = 'destinations'


def clean_filename(name):
    """Keep letters, digits, dots and dashes; everything else becomes ``_``."""
    return re.sub(r'[^a-zA-Z0-9.\-]', '_', name or 'image')


def validate_image(upload):
    if upload is None:
        raise ValidationError("No file provided")
    content_type = getattr(upload, 'content_type', '') or ''
    if not content_type.startswith('image/'):
        raise ValidationError("File must be an image")
    if upload.size > settings.MAX_UPLOAD_SIZE:
        limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise ValidationError(f"File size must be less than {limit_mb}MB")


def save_image(upload, request=None):
    """Validate and store an uploaded image, returning its public URL."""
    validate_image(upload)
    path = f"{UPLOAD_FOLDER}/{int(time.time() * 1000)}-{clean_filename(upload.name)}"
    stored = default_storage.save(path, upload)
    url = default_storage.url(stored)
    if request is not None:
        url = request.build_absolute_uri(url)
    logger.info("Stored image upload at %s", stored)
    return url
