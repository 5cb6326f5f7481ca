from django import forms

TEXT = {'class': 'form-control'}


class HeroSectionForm(forms.Form):
    hero_background_image = forms.CharField(max_length=500, required=False, widget=forms.URLInput(attrs=TEXT))
    hero_headline = forms.CharField(max_length=255, required=False, widget=forms.TextInput(attrs=TEXT))
    hero_subtext = forms.CharField(required=False, widget=forms.Textarea(attrs={**TEXT, 'rows': 2}))
    hero_cta_text = forms.CharField(max_length=100, required=False, widget=forms.TextInput(attrs=TEXT))
    hero_cta_link = forms.CharField(max_length=500, required=False, widget=forms.TextInput(attrs=TEXT))


class ExperiencesSectionForm(forms.Form):
    experiences_title = forms.CharField(max_length=255, required=False, widget=forms.TextInput(attrs=TEXT))
    experiences_subtitle = forms.CharField(max_length=255, required=False, widget=forms.TextInput(attrs=TEXT))
    experiences_description = forms.CharField(required=False, widget=forms.Textarea(attrs={**TEXT, 'rows': 3}))
    experiences_video_url = forms.CharField(max_length=500, required=False, widget=forms.URLInput(attrs=TEXT))
    experiences_video_thumbnail = forms.CharField(max_length=500, required=False, widget=forms.URLInput(attrs=TEXT))
    experiences_video_title = forms.CharField(max_length=255, required=False, widget=forms.TextInput(attrs=TEXT))
    experiences_cta_text = forms.CharField(max_length=100, required=False, widget=forms.TextInput(attrs=TEXT))
    experiences_cta_link = forms.CharField(max_length=500, required=False, widget=forms.TextInput(attrs=TEXT))


class HeroCardForm(forms.Form):
    image = forms.CharField(max_length=500, widget=forms.URLInput(attrs=TEXT))
    title = forms.CharField(max_length=255, widget=forms.TextInput(attrs=TEXT))
    subtitle = forms.CharField(max_length=255, required=False, widget=forms.TextInput(attrs=TEXT))
    navigation_link = forms.CharField(max_length=500, required=False, widget=forms.TextInput(attrs=TEXT))
    enabled = forms.BooleanField(required=False, initial=True)
    order = forms.IntegerField(min_value=0, required=False, widget=forms.NumberInput(attrs=TEXT))


class ExperienceActivityForm(forms.Form):
    name = forms.CharField(max_length=255, widget=forms.TextInput(attrs=TEXT))
    enabled = forms.BooleanField(required=False, initial=True)
    order = forms.IntegerField(min_value=0, required=False, widget=forms.NumberInput(attrs=TEXT))


class ExperienceCardForm(forms.Form):
    title = forms.CharField(max_length=255, widget=forms.TextInput(attrs=TEXT))
    image = forms.CharField(max_length=500, widget=forms.URLInput(attrs=TEXT))
    is_new = forms.BooleanField(required=False)
    tour_count = forms.CharField(max_length=50, required=False, widget=forms.TextInput(attrs=TEXT))
    enabled = forms.BooleanField(required=False, initial=True)
    order = forms.IntegerField(min_value=0, required=False, widget=forms.NumberInput(attrs=TEXT))


HeroCardFormSet = forms.formset_factory(HeroCardForm, extra=1, can_delete=True)
ExperienceActivityFormSet = forms.formset_factory(ExperienceActivityForm, extra=1, can_delete=True)
ExperienceCardFormSet = forms.formset_factory(ExperienceCardForm, extra=1, can_delete=True)


def kept_rows(formset):
    """Cleaned rows of a valid formset, minus blank extras and deleted rows."""
    return [
        {k: v for k, v in form.cleaned_data.items() if k != 'DELETE'}
        for form in formset.forms
        if form.cleaned_data and not form.cleaned_data.get('DELETE')
    ]
