"""
Service provider category assignments.

An assignment with no subcategory covers the whole category; otherwise it
covers exactly one subcategory of that category.
"""
import logging

from django.contrib.auth import get_user_model
from django.db.models import Q
from rest_framework.exceptions import NotFound, ValidationError

from ..models import Category, ServiceProviderCategory, Subcategory
from .catalog import parse_id

logger = logging.getLogger(__name__)

User = get_user_model()


def get_service_provider(provider_id):
    provider = User.objects.filter(pk=provider_id, role=User.Role.SERVICE_PROVIDER).first()
    if provider is None:
        raise NotFound("Service provider not found")
    return provider


def can_submit(provider, category_id, subcategory_id=None):
    """True when ``provider`` may create destinations for the pair."""
    category_id = parse_id(category_id)
    if category_id is None:
        return False
    scope = Q(subcategory__isnull=True)
    subcategory_id = parse_id(subcategory_id) if subcategory_id else None
    if subcategory_id:
        scope |= Q(subcategory_id=subcategory_id)
    return ServiceProviderCategory.objects.filter(
        scope,
        service_provider=provider,
        category_id=category_id,
    ).exists()


def assigned_categories(provider):
    """Categories the provider can submit into, each with its usable subcategories."""
    assignments = ServiceProviderCategory.objects.filter(
        service_provider=provider
    ).select_related('category', 'subcategory')

    tree = {}
    for assignment in assignments:
        entry = tree.setdefault(assignment.category_id, {
            'category': assignment.category,
            'all_subcategories': False,
            'subcategories': [],
        })
        if assignment.subcategory is None:
            entry['all_subcategories'] = True
        else:
            entry['subcategories'].append(assignment.subcategory)

    for entry in tree.values():
        if entry['all_subcategories']:
            entry['subcategories'] = list(entry['category'].subcategories.all())
    return sorted(tree.values(), key=lambda e: e['category'].name)


def assign_category(provider, category_id, subcategory_id=None):
    if not category_id:
        raise ValidationError("Category ID is required")

    category_pk = parse_id(category_id)
    category = Category.objects.filter(pk=category_pk).first() if category_pk else None
    if category is None:
        raise NotFound("Category not found")

    subcategory = None
    if subcategory_id:
        subcategory_pk = parse_id(subcategory_id)
        subcategory = Subcategory.objects.filter(pk=subcategory_pk).first() if subcategory_pk else None
        if subcategory is None or subcategory.category_id != category.pk:
            raise ValidationError("Subcategory not found or does not belong to the specified category")

    if ServiceProviderCategory.objects.filter(
        service_provider=provider, category=category, subcategory=subcategory
    ).exists():
        raise ValidationError("Category assignment already exists")

    assignment = ServiceProviderCategory.objects.create(
        service_provider=provider,
        category=category,
        subcategory=subcategory,
    )
    logger.info("Assigned %s to service provider %s", assignment, provider.pk)
    return assignment


def remove_assignment(provider, assignment_id):
    if not assignment_id:
        raise ValidationError("Assignment ID is required")
    assignment_pk = parse_id(assignment_id)
    assignment = ServiceProviderCategory.objects.filter(
        pk=assignment_pk, service_provider=provider
    ).first() if assignment_pk else None
    if assignment is None:
        raise NotFound("Category assignment not found")
    assignment.delete()
    logger.info("Removed assignment %s from service provider %s", assignment_id, provider.pk)
