"""
Landing page section storage.

Saving a section is an upsert: scalar fields are only touched when present
in the payload, and a provided item list replaces the stored one.
"""
import logging

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import ValidationError

from travel.cache_utils import get_cache_key, get_or_set_cache, invalidate_cache

from .models import ExperienceActivity, ExperienceCard, HeroCard, LandingPageConfig
from .serializers import LandingPageConfigSerializer, empty_section

logger = logging.getLogger(__name__)

DEFAULT_SECTION = LandingPageConfig.Section.HERO


def section_cache_key(section):
    return get_cache_key('landing', section=section)


def public_section(section=None):
    """Section payload with enabled items only; cached until the next save."""
    section = section or DEFAULT_SECTION

    def build():
        config = LandingPageConfig.objects.filter(section=section).first()
        if config is None:
            return empty_section(section)
        return dict(LandingPageConfigSerializer(config, context={'enabled_only': True}).data)

    return get_or_set_cache(section_cache_key(section), build, timeout=settings.CACHE_TTL.get('landing'))


def _flag(value, default):
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'on', 'yes')
    return bool(value)


def _order(item, index):
    value = item.get('order')
    if value in (None, ''):
        return index
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid order: {value}")


def _items(data, key):
    items = data.get(key)
    if items is None:
        return None
    if not isinstance(items, list):
        raise ValidationError(f"{key} must be a list")
    return items


def _replace_hero_cards(config, cards):
    config.hero_cards.all().delete()
    HeroCard.objects.bulk_create(
        HeroCard(
            config=config,
            image=card.get('image') or '',
            title=card.get('title') or '',
            subtitle=card.get('subtitle') or None,
            navigation_link=card.get('navigation_link') or None,
            enabled=_flag(card.get('enabled'), True),
            order=_order(card, index),
        )
        for index, card in enumerate(cards)
    )


def _replace_activities(config, activities):
    config.experience_activities.all().delete()
    ExperienceActivity.objects.bulk_create(
        ExperienceActivity(
            config=config,
            name=activity.get('name') or '',
            enabled=_flag(activity.get('enabled'), True),
            order=_order(activity, index),
        )
        for index, activity in enumerate(activities)
    )


def _replace_experience_cards(config, cards):
    config.experience_cards.all().delete()
    ExperienceCard.objects.bulk_create(
        ExperienceCard(
            config=config,
            title=card.get('title') or '',
            image=card.get('image') or '',
            is_new=_flag(card.get('is_new'), False),
            tour_count=card.get('tour_count') or None,
            enabled=_flag(card.get('enabled'), True),
            order=_order(card, index),
        )
        for index, card in enumerate(cards)
    )


def save_section(data):
    """Create or update one section from ``data``; returns the saved config."""
    section = (data.get('section') or DEFAULT_SECTION).strip()
    hero_cards = _items(data, 'hero_cards')
    activities = _items(data, 'experience_activities')
    experience_cards = _items(data, 'experience_cards')

    with transaction.atomic():
        config, created = LandingPageConfig.objects.get_or_create(section=section)
        changed = [field for field in LandingPageConfig.SCALAR_FIELDS if field in data]
        for field in changed:
            setattr(config, field, data.get(field) or None)
        if changed:
            config.save()

        if section == LandingPageConfig.Section.HERO and hero_cards is not None:
            _replace_hero_cards(config, hero_cards)
        if section == LandingPageConfig.Section.EXPERIENCES:
            if activities is not None:
                _replace_activities(config, activities)
            if experience_cards is not None:
                _replace_experience_cards(config, experience_cards)

    invalidate_cache(keys=[section_cache_key(section)])
    logger.info("Landing page section %s %s", section, 'created' if created else 'updated')
    return config
