import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from rest_framework.exceptions import APIException
from rest_framework.permissions import SAFE_METHODS, AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from travel.exceptions import error_message
from travel.models import Destination
from users.permissions import IsAdminRole

from . import services
from .forms import (
    ExperienceActivityFormSet, ExperienceCardFormSet, ExperiencesSectionForm, HeroCardFormSet, HeroSectionForm,
    kept_rows,
)
from .models import LandingPageConfig
from .serializers import LandingPageConfigSerializer

logger = logging.getLogger(__name__)


class LandingPageView(APIView):
    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [AllowAny()]
        return [IsAdminRole()]

    def get(self, request):
        return Response(services.public_section(request.query_params.get('section')))

    def post(self, request):
        config = services.save_section(request.data)
        return Response(LandingPageConfigSerializer(config).data)

    def put(self, request):
        return self.post(request)


def home(request):
    featured = Destination.objects.filter(status=Destination.Status.APPROVED) \
        .select_related('category', 'subcategory').order_by('-rating', '-view_count')[:8]
    return render(request, 'landing/home.html', {
        'hero': services.public_section(LandingPageConfig.Section.HERO),
        'experiences': services.public_section(LandingPageConfig.Section.EXPERIENCES),
        'featured': featured,
    })


def _section_initial(section):
    config = LandingPageConfig.objects.filter(section=section).first()
    if config is None:
        return {}, [], [], []
    scalars = {field: getattr(config, field) for field in LandingPageConfig.SCALAR_FIELDS}
    hero_cards = list(config.hero_cards.values('image', 'title', 'subtitle', 'navigation_link', 'enabled', 'order'))
    activities = list(config.experience_activities.values('name', 'enabled', 'order'))
    cards = list(config.experience_cards.values('title', 'image', 'is_new', 'tour_count', 'enabled', 'order'))
    return scalars, hero_cards, activities, cards


def admin_landing_page(request):
    hero_scalars, hero_cards, _, _ = _section_initial(LandingPageConfig.Section.HERO)
    exp_scalars, _, activities, exp_cards = _section_initial(LandingPageConfig.Section.EXPERIENCES)
    section = request.POST.get('section') if request.method == 'POST' else None

    is_hero = section == LandingPageConfig.Section.HERO
    is_exp = section == LandingPageConfig.Section.EXPERIENCES

    hero_form = HeroSectionForm(request.POST if is_hero else None, initial=hero_scalars)
    hero_cards_fs = HeroCardFormSet(request.POST if is_hero else None, initial=hero_cards, prefix='hero_cards')
    exp_form = ExperiencesSectionForm(request.POST if is_exp else None, initial=exp_scalars)
    activities_fs = ExperienceActivityFormSet(request.POST if is_exp else None, initial=activities, prefix='activities')
    exp_cards_fs = ExperienceCardFormSet(request.POST if is_exp else None, initial=exp_cards, prefix='exp_cards')

    data = None
    if is_hero and hero_form.is_valid() and hero_cards_fs.is_valid():
        data = {'section': section, **hero_form.cleaned_data, 'hero_cards': kept_rows(hero_cards_fs)}
    elif is_exp and exp_form.is_valid() and activities_fs.is_valid() and exp_cards_fs.is_valid():
        data = {
            'section': section,
            **exp_form.cleaned_data,
            'experience_activities': kept_rows(activities_fs),
            'experience_cards': kept_rows(exp_cards_fs),
        }
    elif section:
        messages.error(request, "Please fix the highlighted fields")

    if data is not None:
        try:
            services.save_section(data)
        except APIException as e:
            messages.error(request, error_message(e.detail))
        else:
            messages.success(request, f"{section.title()} section saved")
            return redirect('landing:admin_landing_page')

    return render(request, 'landing/admin_landing_page.html', {
        'hero_form': hero_form,
        'hero_cards': hero_cards_fs,
        'exp_form': exp_form,
        'activities': activities_fs,
        'exp_cards': exp_cards_fs,
    })
