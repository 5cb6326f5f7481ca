"""
Dynamic destination form engine.

Admins describe a category's destination form as an ordered list of
``FormField`` rows. This module turns that metadata into:

* layout rows (consecutive half-width fields share a row),
* a Django form class used by the create pages,
* a required-field check applied on submission,

and owns the replace-all save used by the form-config screens.
"""
import logging

from django import forms
from django.db import transaction
from rest_framework.exceptions import ValidationError

from .models import FormField

logger = logging.getLogger(__name__)

FIELD_TYPES = [value for value, _ in FormField.FieldType.choices]
FIELD_WIDTHS = [value for value, _ in FormField.Width.choices]
CHOICE_TYPES = (FormField.FieldType.SELECT, FormField.FieldType.RADIO)

# Offered to admins when a category has no configuration yet
DEFAULT_FORM_FIELDS = [
    {'name': 'name', 'label': 'Destination Name', 'field_type': 'text', 'required': True,
     'placeholder': 'Enter destination name', 'width': 'full'},
    {'name': 'description', 'label': 'Description', 'field_type': 'textarea', 'required': True,
     'placeholder': 'Describe the destination', 'width': 'full'},
    {'name': 'location', 'label': 'Location', 'field_type': 'text', 'required': True,
     'placeholder': 'Enter location', 'width': 'full'},
    {'name': 'latitude', 'label': 'Latitude', 'field_type': 'number', 'required': True,
     'placeholder': 'Enter latitude', 'width': 'half'},
    {'name': 'longitude', 'label': 'Longitude', 'field_type': 'number', 'required': True,
     'placeholder': 'Enter longitude', 'width': 'half'},
    {'name': 'pickup_location', 'label': 'Pickup Location', 'field_type': 'text', 'required': True,
     'placeholder': 'Enter pickup location', 'width': 'full'},
    {'name': 'price', 'label': 'Price', 'field_type': 'number', 'required': True,
     'placeholder': 'Enter price', 'width': 'half'},
    {'name': 'image_url', 'label': 'Main Image', 'field_type': 'image', 'required': False,
     'placeholder': 'Upload or enter image URL', 'width': 'full'},
    {'name': 'start_time', 'label': 'Start Time', 'field_type': 'time', 'required': False,
     'placeholder': 'Select start time', 'width': 'half'},
    {'name': 'end_time', 'label': 'End Time', 'field_type': 'time', 'required': False,
     'placeholder': 'Select end time', 'width': 'half'},
    {'name': 'meeting_point', 'label': 'Meeting Point', 'field_type': 'location', 'required': False,
     'placeholder': 'Search for meeting point...', 'width': 'full'},
    {'name': 'drop_off_point', 'label': 'Drop-off Point', 'field_type': 'location', 'required': False,
     'placeholder': 'Search for drop-off point...', 'width': 'full'},
    {'name': 'start_date_time', 'label': 'Start Date & Time', 'field_type': 'dateTime', 'required': False,
     'placeholder': 'Select start date and time', 'width': 'half'},
    {'name': 'end_date_time', 'label': 'End Date & Time', 'field_type': 'dateTime', 'required': False,
     'placeholder': 'Select end date and time', 'width': 'half'},
]


def _get(field, attr, default=None):
    if isinstance(field, dict):
        return field.get(attr, default)
    return getattr(field, attr, default)


def parse_options(options):
    """Split newline-separated option text, dropping blank lines."""
    if not options:
        return []
    return [line.strip() for line in options.splitlines() if line.strip()]


def sort_fields(fields):
    return sorted(fields, key=lambda f: _get(f, 'order', 0) or 0)


def layout_rows(fields):
    """
    Group fields into display rows.

    Fields are walked in ``order``; a half-width field followed by another
    half-width field produces a two-field row, anything else sits alone.
    """
    ordered = sort_fields(fields)
    rows = []
    i = 0
    while i < len(ordered):
        current = ordered[i]
        following = ordered[i + 1] if i + 1 < len(ordered) else None
        if _get(current, 'width') == FormField.Width.HALF and following is not None \
                and _get(following, 'width') == FormField.Width.HALF:
            rows.append([current, following])
            i += 2
        else:
            rows.append([current])
            i += 1
    return rows


def _is_blank(value):
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    return False


def missing_required_fields(fields, data, files=None):
    """Return the required field definitions with no submitted value."""
    files = files or {}
    missing = []
    for field in sort_fields(fields):
        if not _get(field, 'required'):
            continue
        name = _get(field, 'name')
        if _get(field, 'field_type') == FormField.FieldType.IMAGE and files.get(name):
            continue
        if _is_blank(data.get(name)):
            missing.append(field)
    return missing


def validate_required(fields, data, files=None):
    missing = missing_required_fields(fields, data, files)
    if missing:
        labels = ', '.join(_get(f, 'label') for f in missing)
        raise ValidationError(f"Missing required fields: {labels}")


# ----------------------------------------------------------------------
# Django form generation
# ----------------------------------------------------------------------
def _form_field(field):
    field_type = _get(field, 'field_type')
    required = bool(_get(field, 'required'))
    label = _get(field, 'label')
    attrs = {'class': 'form-control', 'placeholder': _get(field, 'placeholder') or ''}

    if field_type == FormField.FieldType.TEXTAREA:
        return forms.CharField(label=label, required=required, widget=forms.Textarea(attrs={**attrs, 'rows': 4}))
    if field_type == FormField.FieldType.NUMBER:
        return forms.DecimalField(label=label, required=required, widget=forms.NumberInput(attrs={**attrs, 'step': 'any'}))
    if field_type == FormField.FieldType.DATE:
        return forms.DateField(label=label, required=required, widget=forms.DateInput(attrs={**attrs, 'type': 'date'}))
    if field_type == FormField.FieldType.TIME:
        return forms.TimeField(label=label, required=required, widget=forms.TimeInput(attrs={**attrs, 'type': 'time'}))
    if field_type == FormField.FieldType.DATETIME:
        return forms.DateTimeField(
            label=label,
            required=required,
            input_formats=['%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M', '%Y-%m-%d %H:%M:%S'],
            widget=forms.DateTimeInput(attrs={**attrs, 'type': 'datetime-local'}),
        )
    if field_type == FormField.FieldType.IMAGE:
        # Either a file upload or a pasted URL satisfies an image field
        return forms.CharField(label=label, required=False, widget=forms.URLInput(attrs=attrs))
    if field_type in CHOICE_TYPES:
        choices = [(option, option) for option in parse_options(_get(field, 'options'))]
        if field_type == FormField.FieldType.RADIO:
            return forms.ChoiceField(label=label, required=required, choices=choices, widget=forms.RadioSelect)
        return forms.ChoiceField(
            label=label,
            required=required,
            choices=[('', '---------')] + choices,
            widget=forms.Select(attrs={'class': 'form-select'}),
        )
    if field_type == FormField.FieldType.CHECKBOX:
        return forms.BooleanField(label=label, required=required)
    if field_type == FormField.FieldType.LOCATION:
        return forms.CharField(label=label, required=required, widget=forms.TextInput(attrs={**attrs, 'data-location': 'true'}))
    return forms.CharField(label=label, required=required, widget=forms.TextInput(attrs=attrs))


def build_form_class(fields, name='DestinationDynamicForm'):
    """Build a ``forms.Form`` subclass with one form field per definition."""
    ordered = sort_fields(fields)
    attrs = {_get(field, 'name'): _form_field(field) for field in ordered}
    attrs['definitions'] = ordered
    attrs['image_field_names'] = [
        _get(f, 'name') for f in ordered if _get(f, 'field_type') == FormField.FieldType.IMAGE
    ]
    return type(name, (forms.Form,), attrs)


# ----------------------------------------------------------------------
# Persistence
# ----------------------------------------------------------------------
def _options_text(options):
    if isinstance(options, (list, tuple)):
        return '\n'.join(str(option).strip() for option in options if str(option).strip())
    return str(options or '')


def clean_definitions(definitions):
    """Validate raw field definitions and normalise them into dicts."""
    cleaned = []
    seen = set()
    for index, raw in enumerate(definitions):
        if not isinstance(raw, dict):
            raise ValidationError(f"Field #{index + 1} must be an object")
        name = str(raw.get('name') or '').strip()
        label = str(raw.get('label') or '').strip()
        field_type = raw.get('field_type') or raw.get('type') or FormField.FieldType.TEXT
        width = raw.get('width') or FormField.Width.FULL
        options = _options_text(raw.get('options'))

        if not name:
            raise ValidationError(f"Field #{index + 1} needs a name")
        if not label:
            raise ValidationError(f"Field '{name}' needs a label")
        if name in seen:
            raise ValidationError(f"Duplicate field name: {name}")
        if field_type not in FIELD_TYPES:
            raise ValidationError(f"Unknown field type '{field_type}' for field '{name}'")
        if width not in FIELD_WIDTHS:
            raise ValidationError(f"Unknown width '{width}' for field '{name}'")
        if field_type in CHOICE_TYPES and not parse_options(options):
            raise ValidationError(f"Field '{name}' needs at least one option")

        seen.add(name)
        order = raw.get('order')
        if order not in (None, ''):
            try:
                order = int(order)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid order for field '{name}': {order}")
            if order < 0:
                raise ValidationError(f"Invalid order for field '{name}': {order}")
        cleaned.append({
            'name': name,
            'label': label,
            'field_type': field_type,
            'required': bool(raw.get('required', False)),
            'placeholder': str(raw.get('placeholder') or ''),
            'options': options,
            'order': order if order not in (None, '') else index,
            'width': width,
        })
    return cleaned


def replace_form_fields(category, definitions):
    """Replace every form field of ``category`` with ``definitions``."""
    cleaned = clean_definitions(definitions)
    with transaction.atomic():
        category.form_fields.all().delete()
        FormField.objects.bulk_create(
            FormField(category=category, **definition) for definition in cleaned
        )
    logger.info("Saved %d form fields for category %s", len(cleaned), category.pk)
    return list(category.form_fields.all())


def fields_for_category(category):
    """Configured fields, or unsaved defaults when the category has none."""
    fields = list(category.form_fields.all())
    if fields:
        return fields
    return [
        FormField(category=category, order=index, **definition)
        for index, definition in enumerate(DEFAULT_FORM_FIELDS)
    ]
