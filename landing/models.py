from django.db import models


# ----------------------------------------------------------------------
# 1. Section config
# ----------------------------------------------------------------------
class LandingPageConfig(models.Model):
    class Section(models.TextChoices):
        HERO = 'hero', 'Hero'
        EXPERIENCES = 'experiences', 'Experiences'

    section = models.CharField(max_length=50, unique=True)

    hero_background_image = models.CharField(max_length=500, blank=True, null=True)
    hero_headline = models.CharField(max_length=255, blank=True, null=True)
    hero_subtext = models.TextField(blank=True, null=True)
    hero_cta_text = models.CharField(max_length=100, blank=True, null=True)
    hero_cta_link = models.CharField(max_length=500, blank=True, null=True)

    experiences_title = models.CharField(max_length=255, blank=True, null=True)
    experiences_subtitle = models.CharField(max_length=255, blank=True, null=True)
    experiences_description = models.TextField(blank=True, null=True)
    experiences_video_url = models.CharField(max_length=500, blank=True, null=True)
    experiences_video_thumbnail = models.CharField(max_length=500, blank=True, null=True)
    experiences_video_title = models.CharField(max_length=255, blank=True, null=True)
    experiences_cta_text = models.CharField(max_length=100, blank=True, null=True)
    experiences_cta_link = models.CharField(max_length=500, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    SCALAR_FIELDS = (
        'hero_background_image', 'hero_headline', 'hero_subtext', 'hero_cta_text', 'hero_cta_link',
        'experiences_title', 'experiences_subtitle', 'experiences_description', 'experiences_video_url',
        'experiences_video_thumbnail', 'experiences_video_title', 'experiences_cta_text', 'experiences_cta_link',
    )

    def __str__(self):
        return f"Landing page: {self.section}"


# ----------------------------------------------------------------------
# 2. Ordered collections
# ----------------------------------------------------------------------
class OrderedItem(models.Model):
    enabled = models.BooleanField(default=True)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True
        ordering = ['order', 'id']


class HeroCard(OrderedItem):
    config = models.ForeignKey(LandingPageConfig, on_delete=models.CASCADE, related_name='hero_cards')
    image = models.CharField(max_length=500, blank=True)
    title = models.CharField(max_length=255, blank=True)
    subtitle = models.CharField(max_length=255, blank=True, null=True)
    navigation_link = models.CharField(max_length=500, blank=True, null=True)

    def __str__(self):
        return self.title


class ExperienceActivity(OrderedItem):
    config = models.ForeignKey(LandingPageConfig, on_delete=models.CASCADE, related_name='experience_activities')
    name = models.CharField(max_length=255, blank=True)

    class Meta(OrderedItem.Meta):
        verbose_name_plural = "Experience activities"

    def __str__(self):
        return self.name


class ExperienceCard(OrderedItem):
    config = models.ForeignKey(LandingPageConfig, on_delete=models.CASCADE, related_name='experience_cards')
    title = models.CharField(max_length=255, blank=True)
    image = models.CharField(max_length=500, blank=True)
    is_new = models.BooleanField(default=False)
    tour_count = models.CharField(max_length=50, blank=True, null=True)

    def __str__(self):
        return self.title
