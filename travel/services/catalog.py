"""
Category and subcategory management.

Names are unique case-insensitively (categories globally, subcategories
within their category). The cached category tree is dropped on every write.
"""
import logging

from django.conf import settings
from django.db.models import Count
from rest_framework.exceptions import NotFound, ValidationError

from ..cache_utils import get_or_set_cache, invalidate_cache
from ..models import Category, Subcategory

logger = logging.getLogger(__name__)

CATEGORY_TREE_KEY = 'categories:tree'


def parse_id(value):
    """Positive integer id from a submitted value, or ``None``."""
    try:
        value = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def category_queryset():
    return Category.objects.annotate(
        destination_count=Count('destinations', distinct=True)
    ).prefetch_related('subcategories')


def cached_category_tree(serialize):
    """Category list rendered by ``serialize``, cached until the next write."""
    return get_or_set_cache(
        CATEGORY_TREE_KEY,
        lambda: serialize(category_queryset()),
        timeout=settings.CACHE_TTL.get('categories'),
    )


def get_category(category_id):
    category = Category.objects.filter(pk=category_id).first()
    if category is None:
        raise NotFound("Category not found")
    return category


def _clean_name(name, label):
    name = (name or '').strip()
    if not name:
        raise ValidationError(f"{label} name is required")
    return name


def create_category(name, description=None):
    name = _clean_name(name, 'Category')
    if Category.objects.filter(name__iexact=name).exists():
        raise ValidationError("Category with this name already exists")
    category = Category.objects.create(name=name, description=description or None)
    invalidate_cache(keys=[CATEGORY_TREE_KEY])
    logger.info("Created category %s", category.name)
    return category


def update_category(category, name, description=None):
    name = _clean_name(name, 'Category')
    if Category.objects.filter(name__iexact=name).exclude(pk=category.pk).exists():
        raise ValidationError("Category with this name already exists")
    category.name = name
    category.description = description or None
    category.save()
    invalidate_cache(keys=[CATEGORY_TREE_KEY])
    return category


def delete_category(category):
    if category.destinations.exists():
        raise ValidationError(
            "Cannot delete category with destinations. Please move or delete destinations first."
        )
    if category.subcategories.exists():
        raise ValidationError(
            "Cannot delete category with subcategories. Please delete subcategories first."
        )
    logger.info("Deleting category %s", category.name)
    category.delete()
    invalidate_cache(keys=[CATEGORY_TREE_KEY])


def get_subcategory(category, subcategory_id):
    subcategory = Subcategory.objects.filter(pk=subcategory_id, category=category).first()
    if subcategory is None:
        raise NotFound("Subcategory not found")
    return subcategory


def create_subcategory(category, name, description=None):
    name = _clean_name(name, 'Subcategory')
    if category.subcategories.filter(name__iexact=name).exists():
        raise ValidationError("Subcategory with this name already exists in this category")
    subcategory = Subcategory.objects.create(category=category, name=name, description=description or None)
    invalidate_cache(keys=[CATEGORY_TREE_KEY])
    return subcategory


def update_subcategory(subcategory, name, description=None):
    name = _clean_name(name, 'Subcategory')
    duplicate = subcategory.category.subcategories.filter(name__iexact=name).exclude(pk=subcategory.pk)
    if duplicate.exists():
        raise ValidationError("Subcategory with this name already exists in this category")
    subcategory.name = name
    subcategory.description = description or None
    subcategory.save()
    invalidate_cache(keys=[CATEGORY_TREE_KEY])
    return subcategory


def delete_subcategory(subcategory):
    if subcategory.destinations.exists():
        raise ValidationError(
            "Cannot delete subcategory with destinations. Please move or delete destinations first."
        )
    subcategory.delete()
    invalidate_cache(keys=[CATEGORY_TREE_KEY])
