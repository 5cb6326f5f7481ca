from django import forms

from .models import Category, Destination, FormField, Subcategory


class CategoryForm(forms.Form):
    name = forms.CharField(max_length=100, widget=forms.TextInput(attrs={'class': 'form-control'}))
    description = forms.CharField(required=False, widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3}))


class SubcategoryForm(CategoryForm):
    pass


class FormFieldForm(forms.Form):
    name = forms.CharField(max_length=100, widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'field_name'}))
    label = forms.CharField(max_length=150, widget=forms.TextInput(attrs={'class': 'form-control'}))
    field_type = forms.ChoiceField(choices=FormField.FieldType.choices, widget=forms.Select(attrs={'class': 'form-select'}))
    required = forms.BooleanField(required=False)
    placeholder = forms.CharField(max_length=255, required=False, widget=forms.TextInput(attrs={'class': 'form-control'}))
    options = forms.CharField(required=False, widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 2}))
    order = forms.IntegerField(min_value=0, required=False, widget=forms.NumberInput(attrs={'class': 'form-control'}))
    width = forms.ChoiceField(choices=FormField.Width.choices, widget=forms.Select(attrs={'class': 'form-select'}))


FormFieldFormSet = forms.formset_factory(FormFieldForm, extra=1, can_delete=True)


class DestinationEditForm(forms.Form):
    name = forms.CharField(max_length=200, widget=forms.TextInput(attrs={'class': 'form-control'}))
    description = forms.CharField(required=False, widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 4}))
    location = forms.CharField(max_length=255, required=False, widget=forms.TextInput(attrs={'class': 'form-control'}))
    latitude = forms.FloatField(required=False, widget=forms.NumberInput(attrs={'class': 'form-control', 'step': 'any'}))
    longitude = forms.FloatField(required=False, widget=forms.NumberInput(attrs={'class': 'form-control', 'step': 'any'}))
    pickup_location = forms.CharField(max_length=255, required=False, widget=forms.TextInput(attrs={'class': 'form-control'}))
    price = forms.DecimalField(max_digits=12, decimal_places=2, required=False, widget=forms.NumberInput(attrs={'class': 'form-control'}))
    base_price = forms.DecimalField(max_digits=12, decimal_places=2, required=False, widget=forms.NumberInput(attrs={'class': 'form-control'}))
    markup_percentage = forms.DecimalField(max_digits=6, decimal_places=2, required=False, widget=forms.NumberInput(attrs={'class': 'form-control'}))
    final_price = forms.DecimalField(max_digits=12, decimal_places=2, required=False, widget=forms.NumberInput(attrs={'class': 'form-control'}))
    image_url = forms.URLField(max_length=500, required=False, widget=forms.URLInput(attrs={'class': 'form-control'}))
    category = forms.ModelChoiceField(queryset=Category.objects.all(), widget=forms.Select(attrs={'class': 'form-select'}))
    subcategory = forms.ModelChoiceField(queryset=Subcategory.objects.select_related('category'), required=False,
                                         widget=forms.Select(attrs={'class': 'form-select'}))
    status = forms.ChoiceField(choices=Destination.Status.choices, widget=forms.Select(attrs={'class': 'form-select'}))
    tags = forms.CharField(required=False, help_text="Comma-separated", widget=forms.TextInput(attrs={'class': 'form-control'}))

    @classmethod
    def initial_for(cls, destination):
        return {
            'name': destination.name,
            'description': destination.description,
            'location': destination.location,
            'latitude': destination.latitude,
            'longitude': destination.longitude,
            'pickup_location': destination.pickup_location,
            'price': destination.price,
            'base_price': destination.base_price,
            'markup_percentage': destination.markup_percentage,
            'final_price': destination.final_price,
            'image_url': destination.image_url,
            'category': destination.category_id,
            'subcategory': destination.subcategory_id,
            'status': destination.status,
            'tags': ', '.join(destination.tags.names()),
        }


class ReviewForm(forms.Form):
    action = forms.ChoiceField(choices=[('APPROVE', 'Approve'), ('REJECT', 'Reject')])
    rejection_reason = forms.CharField(required=False, widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 2}))


class AssignmentForm(forms.Form):
    category = forms.ModelChoiceField(queryset=Category.objects.all(), widget=forms.Select(attrs={'class': 'form-select'}))
    subcategory = forms.ModelChoiceField(queryset=Subcategory.objects.select_related('category'), required=False,
                                         empty_label="All subcategories",
                                         widget=forms.Select(attrs={'class': 'form-select'}))


class CommentForm(forms.Form):
    content = forms.CharField(widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3, 'placeholder': 'Share your experience'}))
    rating = forms.TypedChoiceField(
        choices=[('', 'No rating')] + [(i, f"{i} ★") for i in range(1, 6)],
        coerce=int,
        empty_value=None,
        required=False,
        widget=forms.Select(attrs={'class': 'form-select'}),
    )
