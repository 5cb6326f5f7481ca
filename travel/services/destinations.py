"""
Destination submission and approval workflow.

Admins publish directly; service providers submit into the categories they
are assigned to and wait for review.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from .. import form_engine
from ..models import Category, Destination, Subcategory
from ..pricing import compute_final_price, to_decimal
from ..signals import destination_reviewed
from . import assignments, storage
from .catalog import parse_id

logger = logging.getLogger(__name__)

# Submitted keys that never land in custom_fields
STANDARD_FIELDS = (
    'name', 'description', 'location', 'latitude', 'longitude',
    'pickup_location', 'price', 'image_url', 'category', 'subcategory', 'tags',
    'csrfmiddlewaretoken',
)

REVIEW_ACTIONS = ('APPROVE', 'REJECT')


# ----------------------------------------------------------------------
# Lookups
# ----------------------------------------------------------------------
def visible_queryset(user, status=None):
    """Destinations ``user`` may see; ``status`` only narrows the list for admins."""
    qs = Destination.objects.select_related(
        'category', 'subcategory', 'created_by', 'approved_by'
    ).prefetch_related('tags')

    if user is None or not user.is_authenticated:
        return qs.filter(status=Destination.Status.APPROVED)
    if user.is_admin:
        return qs.filter(status=status) if status else qs
    if user.is_service_provider:
        return qs.filter(Q(status=Destination.Status.APPROVED) | Q(created_by=user))
    return qs.filter(status=Destination.Status.APPROVED)


def filter_destinations(qs, category=None, subcategory=None, search=None, tag=None):
    # Unparseable ids are ignored rather than matched
    category = parse_id(category) if category else None
    subcategory = parse_id(subcategory) if subcategory else None
    if category:
        qs = qs.filter(category_id=category)
    if subcategory:
        qs = qs.filter(subcategory_id=subcategory)
    if search:
        qs = qs.filter(
            Q(name__icontains=search)
            | Q(description__icontains=search)
            | Q(location__icontains=search)
        )
    if tag:
        qs = qs.filter(tags__name__in=[tag]).distinct()
    return qs


def get_destination(destination_id):
    destination = Destination.objects.select_related('category', 'subcategory', 'created_by') \
        .filter(pk=destination_id).first()
    if destination is None:
        raise NotFound("Destination not found")
    return destination


def get_visible_destination(destination_id, user):
    destination = get_destination(destination_id)
    if not destination.is_visible_to(user):
        raise NotFound("Destination not found")
    return destination


# ----------------------------------------------------------------------
# Validation helpers
# ----------------------------------------------------------------------
def _text(data, key):
    value = data.get(key)
    if value is None:
        return ''
    return str(value).strip()


def _float(data, key):
    value = _text(data, key)
    if not value:
        return 0.0
    try:
        return float(value)
    except ValueError:
        raise ValidationError(f"Invalid number for {key}")


def validate_image_url(url):
    if not url:
        return ''
    try:
        URLValidator()(url)
    except DjangoValidationError:
        raise ValidationError("Invalid image URL format")
    return url


def resolve_category(category_id, subcategory_id=None):
    category_pk = parse_id(category_id)
    category = Category.objects.filter(pk=category_pk).first() if category_pk else None
    if category is None:
        raise ValidationError("Invalid category")

    subcategory = None
    if subcategory_id:
        subcategory_pk = parse_id(subcategory_id)
        subcategory = Subcategory.objects.filter(pk=subcategory_pk).first() if subcategory_pk else None
        if subcategory is None or subcategory.category_id != category.pk:
            raise ValidationError("Invalid subcategory")
    return category, subcategory


def _tag_names(raw):
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(t).strip() for t in raw if str(t).strip()]
    return [t.strip() for t in str(raw).split(',') if t.strip()]


# ----------------------------------------------------------------------
# Create
# ----------------------------------------------------------------------
def create_destination(user, data, files=None, request=None):
    """
    Create a destination from a submitted dynamic form.

    ``data`` holds the form values (standard fields plus any per-category
    fields), ``files`` the uploaded images keyed by field name.
    """
    files = files or {}
    if not (user.is_admin or user.is_service_provider):
        raise PermissionDenied("Only admins and service providers can create destinations")

    category, subcategory = resolve_category(_text(data, 'category'), _text(data, 'subcategory') or None)

    if user.is_service_provider and not assignments.can_submit(
        user, category.pk, subcategory.pk if subcategory else None
    ):
        raise PermissionDenied(
            "You do not have permission to create destinations in this category/subcategory"
        )

    fields = form_engine.fields_for_category(category)
    form_engine.validate_required(fields, data, files)

    # Everything is parsed and validated before any upload is stored
    image_url = validate_image_url(_text(data, 'image_url'))
    price = to_decimal(data.get('price'), 'price')
    latitude = _float(data, 'latitude')
    longitude = _float(data, 'longitude')
    tags = _tag_names(data.get('tags'))

    custom_fields = {}
    for key in data.keys():
        if key in STANDARD_FIELDS or key in files:
            continue
        value = _text(data, key)
        if value:
            custom_fields[key] = value

    for upload in files.values():
        storage.validate_image(upload)
    for name, upload in files.items():
        url = storage.save_image(upload, request=request)
        custom_fields[name] = url
        if name == 'image_url' and not image_url:
            image_url = url

    is_admin = user.is_admin

    with transaction.atomic():
        destination = Destination.objects.create(
            name=_text(data, 'name'),
            description=_text(data, 'description'),
            location=_text(data, 'location'),
            latitude=latitude,
            longitude=longitude,
            pickup_location=_text(data, 'pickup_location'),
            price=price,
            base_price=price,
            final_price=price,
            image_url=image_url,
            custom_fields=custom_fields,
            category=category,
            subcategory=subcategory,
            created_by=user,
            status=Destination.Status.APPROVED if is_admin else Destination.Status.PENDING,
            approved_by=user if is_admin else None,
            approved_at=timezone.now() if is_admin else None,
        )
        if tags:
            destination.tags.set(tags)

    logger.info(
        "Destination %s created by %s with status %s", destination.pk, user.email, destination.status
    )
    return destination


# ----------------------------------------------------------------------
# Review
# ----------------------------------------------------------------------
def review_destination(admin, destination, action, rejection_reason=None):
    """Approve or reject a pending destination."""
    if not admin.is_admin:
        raise PermissionDenied("Only admins can approve or reject destinations")

    action = (action or '').upper()
    if action not in REVIEW_ACTIONS:
        raise ValidationError("Invalid action. Must be APPROVE or REJECT")

    reason = (rejection_reason or '').strip()
    if action == 'REJECT' and not reason:
        raise ValidationError("Rejection reason is required when rejecting")

    if destination.status != Destination.Status.PENDING:
        raise ValidationError("Only pending destinations can be approved or rejected")

    if action == 'APPROVE':
        destination.status = Destination.Status.APPROVED
        destination.rejection_reason = None
    else:
        destination.status = Destination.Status.REJECTED
        destination.rejection_reason = reason
    destination.approved_by = admin
    destination.approved_at = timezone.now()
    destination.save(update_fields=[
        'status', 'rejection_reason', 'approved_by', 'approved_at', 'updated_at'
    ])

    logger.info("Destination %s %s by %s", destination.pk, destination.status.lower(), admin.email)
    destination_reviewed.send(sender=Destination, destination=destination, reviewer=admin)
    return destination


# ----------------------------------------------------------------------
# Admin edit / delete
# ----------------------------------------------------------------------
def update_destination(admin, destination, data):
    """Full edit of a destination by an admin."""
    if not admin.is_admin:
        raise PermissionDenied("Only admins can edit destinations")

    category, subcategory = resolve_category(
        _text(data, 'category') or destination.category_id,
        _text(data, 'subcategory') or None,
    )

    base_price = to_decimal(data.get('base_price'), 'base_price', default=destination.base_price)
    markup = to_decimal(data.get('markup_percentage'), 'markup_percentage', default=destination.markup_percentage)
    if _text(data, 'markup_percentage') and _text(data, 'base_price'):
        final_price = compute_final_price(base_price, markup)
    else:
        final_price = to_decimal(data.get('final_price'), 'final_price', default=destination.final_price)

    destination.name = _text(data, 'name') or destination.name
    destination.description = _text(data, 'description')
    destination.location = _text(data, 'location')
    destination.latitude = _float(data, 'latitude')
    destination.longitude = _float(data, 'longitude')
    destination.pickup_location = _text(data, 'pickup_location')
    destination.price = to_decimal(data.get('price'), 'price', default=destination.price)
    destination.base_price = base_price
    destination.markup_percentage = markup
    destination.final_price = final_price
    destination.image_url = validate_image_url(_text(data, 'image_url'))
    destination.category = category
    destination.subcategory = subcategory

    new_status = _text(data, 'status').upper()
    if new_status:
        if new_status not in Destination.Status.values:
            raise ValidationError("Invalid status")
        destination.status = new_status
        if new_status == Destination.Status.APPROVED:
            destination.approved_by = admin
            destination.approved_at = timezone.now()
            destination.rejection_reason = None
        elif new_status == Destination.Status.REJECTED:
            destination.rejection_reason = _text(data, 'rejection_reason') or 'Updated by admin'

    with transaction.atomic():
        destination.save()
        if 'tags' in data:
            destination.tags.set(_tag_names(data.get('tags')))

    logger.info("Destination %s updated by %s", destination.pk, admin.email)
    return destination


def delete_destination(admin, destination):
    if not admin.is_admin:
        raise PermissionDenied("Only admins can delete destinations")
    logger.info("Destination %s deleted by %s", destination.pk, admin.email)
    destination.delete()
