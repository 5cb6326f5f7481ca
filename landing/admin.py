from django.contrib import admin

from .models import ExperienceActivity, ExperienceCard, HeroCard, LandingPageConfig


class HeroCardInline(admin.TabularInline):
    model = HeroCard
    extra = 0


class ExperienceActivityInline(admin.TabularInline):
    model = ExperienceActivity
    extra = 0


class ExperienceCardInline(admin.TabularInline):
    model = ExperienceCard
    extra = 0


@admin.register(LandingPageConfig)
class LandingPageConfigAdmin(admin.ModelAdmin):
    list_display = ('section', 'updated_at')
    inlines = [HeroCardInline, ExperienceActivityInline, ExperienceCardInline]
