from rest_framework import serializers

from .models import ExperienceActivity, ExperienceCard, HeroCard, LandingPageConfig


class HeroCardSerializer(serializers.ModelSerializer):
    class Meta:
        model = HeroCard
        fields = ('id', 'image', 'title', 'subtitle', 'navigation_link', 'enabled', 'order')


class ExperienceActivitySerializer(serializers.ModelSerializer):
    class Meta:
        model = ExperienceActivity
        fields = ('id', 'name', 'enabled', 'order')


class ExperienceCardSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExperienceCard
        fields = ('id', 'title', 'image', 'is_new', 'tour_count', 'enabled', 'order')


class LandingPageConfigSerializer(serializers.ModelSerializer):
    """
    Section config with its nested collections.

    Pass ``context={'enabled_only': True}`` to hide disabled items.
    """

    hero_cards = serializers.SerializerMethodField()
    experience_activities = serializers.SerializerMethodField()
    experience_cards = serializers.SerializerMethodField()

    class Meta:
        model = LandingPageConfig
        fields = ('id', 'section') + LandingPageConfig.SCALAR_FIELDS + (
            'hero_cards', 'experience_activities', 'experience_cards', 'updated_at',
        )

    def _items(self, manager, serializer_class):
        qs = manager.all()
        if self.context.get('enabled_only'):
            qs = qs.filter(enabled=True)
        return serializer_class(qs.order_by('order', 'id'), many=True).data

    def get_hero_cards(self, obj):
        return self._items(obj.hero_cards, HeroCardSerializer)

    def get_experience_activities(self, obj):
        return self._items(obj.experience_activities, ExperienceActivitySerializer)

    def get_experience_cards(self, obj):
        return self._items(obj.experience_cards, ExperienceCardSerializer)


def empty_section(section):
    """Payload served before an admin has saved anything for ``section``."""
    payload = {'section': section}
    payload.update({field: None for field in LandingPageConfig.SCALAR_FIELDS})
    payload.update({'hero_cards': [], 'experience_activities': [], 'experience_cards': []})
    return payload
