"""
Unit Tests for Travel App
Covers: form engine, pricing, catalog, destination workflow, engagement, APIs
"""

from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import MagicMock, patch

import requests
from django.core import mail
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase, Client
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from users.models import PasswordResetToken, User

from . import form_engine
from .models import (
    Category, Comment, Destination, FormField, Like, ServiceProviderCategory, Subcategory, View,
)
from .pricing import compute_final_price, format_inr, markup_amount, to_decimal
from .services import assignments
from .services.contact import whatsapp_url
from .services.geocoding import geocode


def make_user(email, role=User.Role.USER, password='testpass123'):
    return User.objects.create_user(email=email, password=password, name=email.split('@')[0], role=role)


def destination_payload(category, **extra):
    data = {
        'category': category.pk,
        'name': 'Mangrove Kayak Trail',
        'description': 'Paddle through protected mangroves',
        'location': 'Goa',
        'latitude': 15.29,
        'longitude': 74.12,
        'pickup_location': 'Panaji bus stand',
        'price': '2500',
    }
    data.update(extra)
    return data


# ==================== MODEL TESTS ====================

class CategoryModelTest(TestCase):
    """Tests for Category model"""

    def test_auto_slug_generation(self):
        """Test automatic slug generation"""
        category = Category.objects.create(name="Eco Tours")
        self.assertEqual(category.slug, "eco-tours")

    def test_slug_is_unique(self):
        """Test slug gets a suffix when taken"""
        Category.objects.create(name="Eco Tours", slug="eco-tours")
        other = Category.objects.create(name="Eco  Tours!")
        self.assertEqual(other.slug, "eco-tours-1")


class DestinationModelTest(TestCase):
    """Tests for Destination model"""

    def setUp(self):
        self.category = Category.objects.create(name="Eco Stays")
        self.owner = make_user('owner@example.com', User.Role.SERVICE_PROVIDER)
        self.destination = Destination.objects.create(
            name="Tree House", category=self.category, created_by=self.owner,
            price=Decimal('1000'), final_price=Decimal('1200'),
        )

    def test_display_price_prefers_final_price(self):
        """Test display price uses the marked-up price"""
        self.assertEqual(self.destination.display_price, Decimal('1200'))

    def test_pending_visibility(self):
        """Test pending destinations are visible to owner and admins only"""
        admin = make_user('admin@example.com', User.Role.ADMIN)
        stranger = make_user('user@example.com')
        self.assertTrue(self.destination.is_visible_to(self.owner))
        self.assertTrue(self.destination.is_visible_to(admin))
        self.assertFalse(self.destination.is_visible_to(stranger))
        self.assertFalse(self.destination.is_visible_to(None))


# ==================== FORM ENGINE TESTS ====================

class FormEngineTest(TestCase):
    """Tests for dynamic form layout and validation"""

    def test_half_width_fields_pair_up(self):
        """Test consecutive half-width fields share a row"""
        fields = [
            {'name': 'a', 'width': 'half', 'order': 0},
            {'name': 'b', 'width': 'half', 'order': 1},
            {'name': 'c', 'width': 'full', 'order': 2},
            {'name': 'd', 'width': 'half', 'order': 3},
        ]
        rows = form_engine.layout_rows(fields)
        self.assertEqual([[f['name'] for f in row] for row in rows], [['a', 'b'], ['c'], ['d']])

    def test_layout_follows_order(self):
        """Test fields are laid out by order, not list position"""
        fields = [
            {'name': 'late', 'width': 'half', 'order': 5},
            {'name': 'wide', 'width': 'full', 'order': 1},
            {'name': 'early', 'width': 'half', 'order': 0},
        ]
        rows = form_engine.layout_rows(fields)
        self.assertEqual([[f['name'] for f in row] for row in rows], [['early'], ['wide'], ['late']])

    def test_default_fields_layout(self):
        """Test default form renders in eleven rows"""
        self.assertEqual(len(form_engine.layout_rows(form_engine.DEFAULT_FORM_FIELDS)), 11)

    def test_missing_required_fields(self):
        """Test blank required values are reported"""
        fields = [
            {'name': 'name', 'label': 'Name', 'required': True, 'field_type': 'text'},
            {'name': 'photo', 'label': 'Photo', 'required': True, 'field_type': 'image'},
            {'name': 'notes', 'label': 'Notes', 'required': False, 'field_type': 'text'},
        ]
        missing = form_engine.missing_required_fields(fields, {'name': '   '}, {'photo': object()})
        self.assertEqual([f['name'] for f in missing], ['name'])

    def test_clean_definitions_rejects_duplicates(self):
        """Test duplicate field names are rejected"""
        from rest_framework.exceptions import ValidationError
        with self.assertRaises(ValidationError):
            form_engine.clean_definitions([
                {'name': 'x', 'label': 'X'},
                {'name': 'x', 'label': 'X again'},
            ])

    def test_select_needs_options(self):
        """Test select fields require at least one option"""
        from rest_framework.exceptions import ValidationError
        with self.assertRaises(ValidationError):
            form_engine.clean_definitions([{'name': 'x', 'label': 'X', 'field_type': 'select'}])

    def test_malformed_definitions_are_rejected(self):
        """Test non-object entries and bad order values raise validation errors"""
        from rest_framework.exceptions import ValidationError
        with self.assertRaises(ValidationError):
            form_engine.clean_definitions(['oops'])
        with self.assertRaises(ValidationError):
            form_engine.clean_definitions([{'name': 'x', 'label': 'X', 'order': 'first'}])
        with self.assertRaises(ValidationError):
            form_engine.clean_definitions([{'name': 'x', 'label': 'X', 'order': -1}])

    def test_options_list_is_accepted(self):
        """Test options sent as a list are stored one per line"""
        cleaned = form_engine.clean_definitions([
            {'name': 'level', 'label': 'Level', 'field_type': 'select', 'options': ['Easy', ' Hard ', '']},
        ])
        self.assertEqual(cleaned[0]['options'], 'Easy\nHard')

    def test_replace_form_fields(self):
        """Test saving replaces the whole field list"""
        category = Category.objects.create(name="Learning Trips")
        FormField.objects.create(category=category, name='old', label='Old')
        saved = form_engine.replace_form_fields(category, [
            {'name': 'level', 'label': 'Level', 'field_type': 'radio', 'options': 'Beginner\nExpert\n'},
        ])
        self.assertEqual([f.name for f in saved], ['level'])
        self.assertEqual(form_engine.parse_options(saved[0].options), ['Beginner', 'Expert'])

    def test_build_form_class(self):
        """Test generated form validates choices"""
        form_class = form_engine.build_form_class([
            {'name': 'level', 'label': 'Level', 'field_type': 'select', 'options': 'Easy\nHard', 'required': True},
            {'name': 'cover', 'label': 'Cover', 'field_type': 'image', 'required': True},
        ])
        self.assertEqual(form_class.image_field_names, ['cover'])
        self.assertTrue(form_class({'level': 'Easy'}).is_valid())
        self.assertFalse(form_class({'level': 'Medium'}).is_valid())


# ==================== PRICING / HELPERS ====================

class PricingTest(TestCase):
    """Tests for price helpers"""

    def test_compute_final_price(self):
        """Test markup is applied and rounded to paise"""
        self.assertEqual(compute_final_price(Decimal('1000'), Decimal('12.5')), Decimal('1125.00'))
        self.assertEqual(compute_final_price(Decimal('999.99'), 0), Decimal('999.99'))

    def test_markup_amount(self):
        """Test markup amount"""
        self.assertEqual(markup_amount(Decimal('200'), Decimal('15')), Decimal('30.00'))

    def test_to_decimal_invalid(self):
        """Test invalid amounts raise"""
        from rest_framework.exceptions import ValidationError
        with self.assertRaises(ValidationError):
            to_decimal('abc')
        self.assertEqual(to_decimal(''), Decimal('0'))

    def test_format_inr(self):
        """Test rupee formatting"""
        self.assertEqual(format_inr(12345), "₹12,345")
        self.assertEqual(format_inr(Decimal('12345.5')), "₹12,345.50")

    def test_whatsapp_url(self):
        """Test WhatsApp booking link"""
        category = Category.objects.create(name="Adventures")
        owner = make_user('sp@example.com', User.Role.SERVICE_PROVIDER)
        destination = Destination.objects.create(name="Zip Line", category=category, created_by=owner)
        url = whatsapp_url(destination, number='911234567890')
        self.assertTrue(url.startswith('https://wa.me/911234567890?text='))
        self.assertIn('Zip%20Line', url)


# ==================== CATEGORY API ====================

class CategoryAPITest(TestCase):
    """Test category endpoints"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = make_user('admin@example.com', User.Role.ADMIN)
        self.user = make_user('user@example.com')

    def test_list_is_public(self):
        """Test anyone can list categories"""
        category = Category.objects.create(name="Eco Tours")
        Subcategory.objects.create(category=category, name="Bird Watching")
        response = self.client.get('/api/categories')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['categories'][0]['name'], "Eco Tours")
        self.assertEqual(response.data['categories'][0]['subcategories'][0]['name'], "Bird Watching")

    def test_create_requires_admin(self):
        """Test anonymous gets 401 and users get 403"""
        response = self.client.post('/api/categories', {'name': 'Eco Tours'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.force_authenticate(user=self.user)
        response = self.client.post('/api/categories', {'name': 'Eco Tours'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('error', response.data)

    def test_create_rejects_case_insensitive_duplicate(self):
        """Test category names are unique ignoring case"""
        self.client.force_authenticate(user=self.admin)
        response = self.client.post('/api/categories', {'name': 'Eco Tours'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post('/api/categories', {'name': 'eco tours'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "Category with this name already exists")

    def test_list_refreshes_after_create(self):
        """Test cached list is dropped on write"""
        self.client.get('/api/categories')
        self.client.force_authenticate(user=self.admin)
        self.client.post('/api/categories', {'name': 'Wellness Tours'}, format='json')
        response = self.client.get('/api/categories')
        self.assertEqual(len(response.data['categories']), 1)

    def test_delete_guarded_by_subcategories(self):
        """Test category with subcategories cannot be deleted"""
        category = Category.objects.create(name="Eco Tours")
        Subcategory.objects.create(category=category, name="Bird Watching")
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f'/api/categories/{category.pk}')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_subcategory_crud(self):
        """Test subcategory create and duplicate detection"""
        category = Category.objects.create(name="Eco Tours")
        self.client.force_authenticate(user=self.admin)
        url = f'/api/categories/{category.pk}/subcategories'
        response = self.client.post(url, {'name': 'Forest Hiking'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post(url, {'name': 'FOREST HIKING'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        sub_id = Subcategory.objects.get(category=category).pk
        response = self.client.delete(f'{url}/{sub_id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Subcategory.objects.exists())

    def test_subcategory_delete_guarded_by_destinations(self):
        """Test subcategory with destinations cannot be deleted"""
        category = Category.objects.create(name="Eco Tours")
        subcategory = Subcategory.objects.create(category=category, name="Bird Watching")
        Destination.objects.create(
            name="Heron Marsh", category=category, subcategory=subcategory, created_by=self.admin,
        )
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f'/api/categories/{category.pk}/subcategories/{subcategory.pk}')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Cannot delete subcategory with destinations", response.data['error'])
        self.assertTrue(Subcategory.objects.filter(pk=subcategory.pk).exists())

    def test_missing_category_is_404(self):
        """Test unknown category id"""
        response = self.client.get('/api/categories/999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], "Category not found")


class FormFieldsAPITest(TestCase):
    """Test form configuration endpoints"""

    def setUp(self):
        self.client = APIClient()
        self.admin = make_user('admin@example.com', User.Role.ADMIN)
        self.category = Category.objects.create(name="Eco Tours")
        self.url = f'/api/categories/{self.category.pk}/form-fields'

    def test_defaults_when_unconfigured(self):
        """Test unconfigured categories serve the default form"""
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_default'])
        self.assertEqual(len(response.data['fields']), len(form_engine.DEFAULT_FORM_FIELDS))
        self.assertEqual(len(response.data['rows']), 11)

    def test_put_replaces_fields(self):
        """Test admin saves a custom form"""
        self.client.force_authenticate(user=self.admin)
        response = self.client.put(self.url, {'fields': [
            {'name': 'name', 'label': 'Name', 'field_type': 'text', 'required': True},
            {'name': 'group_size', 'label': 'Group size', 'field_type': 'number', 'width': 'half'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_default'])
        self.assertEqual(self.category.form_fields.count(), 2)

    def test_put_rejects_bad_type(self):
        """Test unknown field types are rejected"""
        self.client.force_authenticate(user=self.admin)
        response = self.client.put(self.url, {'fields': [
            {'name': 'x', 'label': 'X', 'field_type': 'colour'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_put_without_field_list_keeps_config(self):
        """Test a missing or non-list fields value leaves the saved form alone"""
        form_engine.replace_form_fields(self.category, [{'name': 'name', 'label': 'Name'}])
        self.client.force_authenticate(user=self.admin)

        response = self.client.put(self.url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "fields must be a list")

        response = self.client.put(self.url, {'fields': 'name'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.category.form_fields.count(), 1)

    def test_put_malformed_entries(self):
        """Test malformed field entries are 400 and nothing is replaced"""
        form_engine.replace_form_fields(self.category, [{'name': 'name', 'label': 'Name'}])
        self.client.force_authenticate(user=self.admin)
        for fields in (['oops'], [{'name': 'x', 'label': 'X', 'order': 'x'}]):
            response = self.client.put(self.url, {'fields': fields}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(list(self.category.form_fields.values_list('name', flat=True)), ['name'])

        response = self.client.put(self.url, {'fields': [
            {'name': 'level', 'label': 'Level', 'field_type': 'radio', 'options': ['Easy', 'Hard']},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['fields'][0]['options_list'], ['Easy', 'Hard'])


# ==================== DESTINATION WORKFLOW ====================

class DestinationAPITest(TestCase):
    """Test destination submission, review and editing"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = make_user('admin@example.com', User.Role.ADMIN)
        self.provider = make_user('sp@example.com', User.Role.SERVICE_PROVIDER)
        self.user = make_user('user@example.com')
        self.category = Category.objects.create(name="Adventures")
        self.subcategory = Subcategory.objects.create(category=self.category, name="Trekking")

    def _assign(self, subcategory=None):
        ServiceProviderCategory.objects.create(
            service_provider=self.provider, category=self.category, subcategory=subcategory
        )

    def _pending(self):
        return Destination.objects.create(
            name="Ridge Trek", category=self.category, created_by=self.provider,
        )

    def test_provider_without_assignment_is_forbidden(self):
        """Test providers can only submit into assigned categories"""
        self.client.force_authenticate(user=self.provider)
        response = self.client.post('/api/destinations', destination_payload(self.category), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_user_cannot_create(self):
        """Test plain users cannot submit destinations"""
        self.client.force_authenticate(user=self.user)
        response = self.client.post('/api/destinations', destination_payload(self.category), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_provider_submission_is_pending(self):
        """Test provider submissions wait for approval"""
        self._assign()
        self.client.force_authenticate(user=self.provider)
        payload = destination_payload(
            self.category, subcategory=self.subcategory.pk, difficulty='Moderate', tags='trek, monsoon',
        )
        response = self.client.post('/api/destinations', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'PENDING')
        self.assertEqual(response.data['custom_fields'], {'difficulty': 'Moderate'})
        self.assertEqual(sorted(response.data['tags']), ['monsoon', 'trek'])

        self.client.force_authenticate(user=None)
        response = self.client.get('/api/destinations')
        self.assertEqual(response.data['destinations'], [])
        self.assertEqual(response.data['pagination']['total'], 0)

    def test_subcategory_assignment_only_covers_that_subcategory(self):
        """Test subcategory-scoped assignments"""
        other = Subcategory.objects.create(category=self.category, name="Rafting")
        self._assign(self.subcategory)
        self.assertTrue(assignments.can_submit(self.provider, self.category.pk, self.subcategory.pk))
        self.assertFalse(assignments.can_submit(self.provider, self.category.pk, other.pk))
        self.assertFalse(assignments.can_submit(self.provider, self.category.pk))

    def test_admin_submission_is_approved(self):
        """Test admin submissions go live immediately"""
        self.client.force_authenticate(user=self.admin)
        response = self.client.post('/api/destinations', destination_payload(self.category), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'APPROVED')
        self.assertEqual(response.data['approved_by']['email'], self.admin.email)

    def test_missing_required_field(self):
        """Test required dynamic fields are enforced"""
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            '/api/destinations', destination_payload(self.category, pickup_location=''), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Pickup Location', response.data['error'])

    def test_subcategory_must_belong_to_category(self):
        """Test mismatched subcategory is rejected"""
        other_category = Category.objects.create(name="Eco Stays")
        self.client.force_authenticate(user=self.admin)
        payload = destination_payload(other_category, subcategory=self.subcategory.pk)
        response = self.client.post('/api/destinations', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "Invalid subcategory")

    def test_non_numeric_category_is_rejected(self):
        """Test malformed category and subcategory ids are 400 for admins and providers"""
        self.client.force_authenticate(user=self.admin)
        payload = destination_payload(self.category)
        payload['category'] = 'abc'
        response = self.client.post('/api/destinations', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "Invalid category")

        response = self.client.post(
            '/api/destinations', destination_payload(self.category, subcategory='x1'), format='json'
        )
        self.assertEqual(response.data['error'], "Invalid subcategory")

        self._assign()
        self.client.force_authenticate(user=self.provider)
        response = self.client.post('/api/destinations', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "Invalid category")

    def test_list_ignores_non_numeric_filters(self):
        """Test malformed filter ids do not break the list"""
        Destination.objects.create(
            name="Open Trail", category=self.category, created_by=self.admin, status=Destination.Status.APPROVED,
        )
        response = self.client.get('/api/destinations', {'category': 'abc', 'subcategory': 'x'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_page_past_end_is_empty(self):
        """Test requesting a page beyond the last returns an empty page"""
        Destination.objects.create(
            name="Open Trail", category=self.category, created_by=self.admin, status=Destination.Status.APPROVED,
        )
        response = self.client.get('/api/destinations', {'page': 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['destinations'], [])
        self.assertEqual(response.data['pagination'], {'page': 5, 'limit': 10, 'total': 1, 'pages': 1})

    @patch('travel.services.storage.default_storage')
    def test_invalid_price_stores_no_upload(self, mock_storage):
        """Test uploads are only stored once every value is valid"""
        self.client.force_authenticate(user=self.admin)
        payload = destination_payload(self.category, price='abc')
        payload['cover'] = SimpleUploadedFile('cover.png', b'\x89PNG', content_type='image/png')
        response = self.client.post('/api/destinations', payload, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        mock_storage.save.assert_not_called()
        self.assertFalse(Destination.objects.exists())

    @patch('travel.services.storage.default_storage')
    def test_upload_goes_to_custom_fields(self, mock_storage):
        """Test uploaded images are stored and their URL kept in custom fields"""
        mock_storage.save.return_value = 'destinations/1-cover.png'
        mock_storage.url.return_value = '/media/destinations/1-cover.png'
        self.client.force_authenticate(user=self.admin)
        payload = destination_payload(self.category)
        payload['cover'] = SimpleUploadedFile('cover.png', b'\x89PNG', content_type='image/png')
        response = self.client.post('/api/destinations', payload, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(
            response.data['custom_fields'], {'cover': 'http://testserver/media/destinations/1-cover.png'}
        )

    def test_pending_hidden_from_public_detail(self):
        """Test pending destination is 404 for strangers"""
        destination = self._pending()
        response = self.client.get(f'/api/destinations/{destination.pk}')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.provider)
        response = self.client.get(f'/api/destinations/{destination.pk}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['liked'])

    def test_approve_sends_email(self):
        """Test approval notifies the owner"""
        destination = self._pending()
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(
            f'/api/destinations/{destination.pk}/approve', {'action': 'approve'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'APPROVED')
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.provider.email])

    def test_reject_requires_reason(self):
        """Test rejection needs a reason"""
        destination = self._pending()
        self.client.force_authenticate(user=self.admin)
        url = f'/api/destinations/{destination.pk}/approve'
        response = self.client.patch(url, {'action': 'REJECT'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(url, {'action': 'REJECT', 'rejection_reason': 'Blurry photos'}, format='json')
        self.assertEqual(response.data['status'], 'REJECTED')
        self.assertEqual(response.data['rejection_reason'], 'Blurry photos')

    def test_only_pending_can_be_reviewed(self):
        """Test reviewing twice fails"""
        destination = self._pending()
        self.client.force_authenticate(user=self.admin)
        url = f'/api/destinations/{destination.pk}/approve'
        self.client.patch(url, {'action': 'APPROVE'}, format='json')
        response = self.client.patch(url, {'action': 'APPROVE'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_update_applies_markup(self):
        """Test base price and markup produce final price"""
        destination = self._pending()
        self.client.force_authenticate(user=self.admin)
        response = self.client.put(f'/api/destinations/{destination.pk}', {
            'name': 'Ridge Trek',
            'base_price': '1000',
            'markup_percentage': '10',
            'status': 'REJECTED',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['final_price'], '1100.00')
        self.assertEqual(response.data['rejection_reason'], 'Updated by admin')

    def test_provider_cannot_update(self):
        """Test only admins edit destinations"""
        destination = self._pending()
        self.client.force_authenticate(user=self.provider)
        response = self.client.put(f'/api/destinations/{destination.pk}', {'name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_filters_by_status(self):
        """Test admins can narrow the list by status"""
        self._pending()
        Destination.objects.create(
            name="Open Trail", category=self.category, created_by=self.admin, status=Destination.Status.APPROVED,
        )
        self.client.force_authenticate(user=self.admin)
        response = self.client.get('/api/destinations', {'status': 'PENDING'})
        self.assertEqual([d['name'] for d in response.data['destinations']], ['Ridge Trek'])


# ==================== ENGAGEMENT ====================

class EngagementAPITest(TestCase):
    """Test likes, comments and views"""

    def setUp(self):
        self.client = APIClient()
        self.user = make_user('user@example.com')
        owner = make_user('admin@example.com', User.Role.ADMIN)
        category = Category.objects.create(name="Wellness Tours")
        self.destination = Destination.objects.create(
            name="Forest Retreat", category=category, created_by=owner, status=Destination.Status.APPROVED,
        )
        self.base = f'/api/destinations/{self.destination.pk}'

    def test_like_requires_login(self):
        """Test anonymous like is 401"""
        response = self.client.post(f'{self.base}/like')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_like_toggles(self):
        """Test liking twice removes the like"""
        self.client.force_authenticate(user=self.user)
        response = self.client.post(f'{self.base}/like')
        self.assertEqual(response.data, {'liked': True, 'like_count': 1})
        response = self.client.post(f'{self.base}/like')
        self.assertEqual(response.data, {'liked': False, 'like_count': 0})

    def test_unlike_when_not_liked(self):
        """Test DELETE without a like fails"""
        self.client.force_authenticate(user=self.user)
        response = self.client.delete(f'{self.base}/like')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "Not liked")

    def test_likes_list(self):
        """Test likes list is paginated"""
        Like.objects.create(destination=self.destination, user=self.user)
        response = self.client.get(f'{self.base}/likes')
        self.assertEqual(response.data['pagination']['total'], 1)
        self.assertEqual(response.data['pagination']['limit'], 20)

    def test_comment_updates_rating(self):
        """Test rated comments refresh the average"""
        self.client.force_authenticate(user=self.user)
        response = self.client.post(f'{self.base}/comments', {'content': 'Lovely', 'rating': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.destination.refresh_from_db()
        self.assertEqual(self.destination.rating, 4.0)

    def test_one_comment_per_user(self):
        """Test second comment is rejected"""
        Comment.objects.create(destination=self.destination, user=self.user, content='First')
        self.client.force_authenticate(user=self.user)
        response = self.client.post(f'{self.base}/comments', {'content': 'Again'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "You have already commented on this destination")

    def test_comment_validation(self):
        """Test empty content and out-of-range rating"""
        self.client.force_authenticate(user=self.user)
        response = self.client.post(f'{self.base}/comments', {'content': '  '}, format='json')
        self.assertEqual(response.data['error'], "Content is required")
        response = self.client.post(f'{self.base}/comments', {'content': 'Ok', 'rating': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_anonymous_view_is_deduplicated(self):
        """Test repeat views from the same IP count once"""
        response = self.client.post(f'{self.base}/view')
        self.assertEqual(response.data, {'view_count': 1, 'already_viewed': False})
        response = self.client.post(f'{self.base}/view')
        self.assertEqual(response.data, {'view_count': 1, 'already_viewed': True})

        response = self.client.post(f'{self.base}/view', REMOTE_ADDR='10.0.0.2')
        self.assertEqual(response.data['view_count'], 2)

    def test_view_counted_again_after_window(self):
        """Test views older than the window do not block a new one"""
        View.objects.create(destination=self.destination, user=self.user)
        View.objects.filter(user=self.user).update(created_at=timezone.now() - timedelta(hours=2))
        self.client.force_authenticate(user=self.user)
        response = self.client.post(f'{self.base}/view')
        self.assertFalse(response.data['already_viewed'])


# ==================== ASSIGNMENTS ====================

class AssignmentAPITest(TestCase):
    """Test service provider category assignment endpoints"""

    def setUp(self):
        self.client = APIClient()
        self.admin = make_user('admin@example.com', User.Role.ADMIN)
        self.provider = make_user('sp@example.com', User.Role.SERVICE_PROVIDER)
        self.category = Category.objects.create(name="Eco Tours")
        self.url = f'/api/admin/service-providers/{self.provider.pk}/categories'
        self.client.force_authenticate(user=self.admin)

    def test_assign_and_remove(self):
        """Test assignment lifecycle"""
        response = self.client.post(self.url, {'category': self.category.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post(self.url, {'category': self.category.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "Category assignment already exists")

        response = self.client.get(self.url)
        self.assertEqual(len(response.data['assignments']), 1)

        assignment_id = ServiceProviderCategory.objects.get().pk
        response = self.client.delete(f'{self.url}?assignment_id={assignment_id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(ServiceProviderCategory.objects.exists())

    def test_unknown_provider(self):
        """Test plain users are not service providers"""
        user = make_user('user@example.com')
        response = self.client.get(f'/api/admin/service-providers/{user.pk}/categories')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_malformed_ids(self):
        """Test non-numeric category and assignment ids are not found"""
        response = self.client.post(self.url, {'category': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], "Category not found")

        response = self.client.delete(f'{self.url}?assignment_id=abc')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(ServiceProviderCategory.objects.exists())

    def test_assigned_categories_expand_whole_category(self):
        """Test category-wide assignment lists every subcategory"""
        Subcategory.objects.create(category=self.category, name="Bird Watching")
        Subcategory.objects.create(category=self.category, name="Forest Hiking")
        assignments.assign_category(self.provider, self.category.pk)
        tree = assignments.assigned_categories(self.provider)
        self.assertTrue(tree[0]['all_subcategories'])
        self.assertEqual(len(tree[0]['subcategories']), 2)


# ==================== SUPPORTING ENDPOINTS ====================

class UploadAPITest(TestCase):
    """Test image upload endpoint"""

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_user('sp@example.com', User.Role.SERVICE_PROVIDER))

    @patch('travel.services.storage.default_storage')
    def test_upload_image(self, mock_storage):
        """Test image is stored and an absolute URL returned"""
        mock_storage.save.return_value = 'destinations/1-my_photo.png'
        mock_storage.url.return_value = '/media/destinations/1-my_photo.png'
        upload = SimpleUploadedFile('my photo.png', b'\x89PNG', content_type='image/png')

        response = self.client.post('/api/upload', {'image': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['image_url'], 'http://testserver/media/destinations/1-my_photo.png')
        saved_path = mock_storage.save.call_args[0][0]
        self.assertTrue(saved_path.endswith('-my_photo.png'))

    def test_rejects_non_image(self):
        """Test non-image files are refused"""
        upload = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
        response = self.client.post('/api/upload', {'image': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], "File must be an image")

    def test_requires_file(self):
        """Test missing file"""
        response = self.client.post('/api/upload', {}, format='multipart')
        self.assertEqual(response.data['error'], "No file provided")


class GeocodeTest(TestCase):
    """Test geocoding helper"""

    @patch('travel.services.geocoding.requests.get')
    def test_geocode_success(self, mock_get):
        """Test first result is returned"""
        mock_response = MagicMock()
        mock_response.json.return_value = [{'lat': '15.49', 'lon': '73.82', 'display_name': 'Panaji, Goa'}]
        mock_get.return_value = mock_response

        result = geocode('Panaji')
        self.assertEqual(result, {'lat': 15.49, 'lon': 73.82, 'display_name': 'Panaji, Goa'})

    @patch('travel.services.geocoding.requests.get')
    def test_geocode_http_error(self, mock_get):
        """Test HTTP errors give no result"""
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = requests.HTTPError('503')
        mock_get.return_value = mock_response
        self.assertIsNone(geocode('Panaji'))

    @patch('time.sleep')
    @patch('travel.services.geocoding.requests.get', side_effect=requests.ConnectionError('unreachable'))
    def test_geocode_retries_connection_errors(self, mock_get, mock_sleep):
        """Test unreachable geocoder is retried three times then gives no result"""
        self.assertIsNone(geocode('Panaji'))
        self.assertEqual(mock_get.call_count, 3)

    @patch('travel.services.geocoding.requests.get')
    def test_geocode_endpoint_no_results(self, mock_get):
        """Test endpoint returns 404 when nothing matches"""
        mock_get.return_value = MagicMock(json=MagicMock(return_value=[]))
        client = APIClient()
        client.force_authenticate(user=make_user('admin@example.com', User.Role.ADMIN))
        response = client.get('/api/geocode', {'q': 'Nowhere'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], "No results found")


class AdminStatsAPITest(TestCase):
    """Test admin stats endpoint"""

    def test_stats(self):
        """Test counts per role and status"""
        admin = make_user('admin@example.com', User.Role.ADMIN)
        make_user('user@example.com')
        client = APIClient()
        client.force_authenticate(user=admin)
        response = client.get('/api/admin/stats')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['users']['TOTAL'], 2)
        self.assertEqual(response.data['destinations']['TOTAL'], 0)
        self.assertEqual(response.data['pending'], [])


# ==================== PAGE VIEW TESTS ====================

class PageViewTest(TestCase):
    """Test server-rendered pages and role routing"""

    def setUp(self):
        cache.clear()
        self.client = Client()
        self.admin = make_user('admin@example.com', User.Role.ADMIN)
        self.user = make_user('user@example.com')
        self.category = Category.objects.create(name="Heritage Tours")

    def test_anonymous_redirected_to_signin(self):
        """Test role areas require login"""
        response = self.client.get('/admin/dashboard/')
        self.assertEqual(response.status_code, 302)
        self.assertIn('/auth/signin/', response.url)

    def test_wrong_role_redirected_to_own_dashboard(self):
        """Test users cannot open the admin area"""
        self.client.force_login(self.user)
        response = self.client.get('/admin/dashboard/')
        self.assertRedirects(response, '/user/dashboard/')

    def test_admin_dashboard(self):
        """Test admin dashboard renders"""
        self.client.force_login(self.admin)
        response = self.client.get('/admin/dashboard/')
        self.assertEqual(response.status_code, 200)

    def test_destination_list_page(self):
        """Test public list shows approved destinations only"""
        Destination.objects.create(
            name="Old Fort", category=self.category, created_by=self.admin, status=Destination.Status.APPROVED,
        )
        Destination.objects.create(name="Secret Fort", category=self.category, created_by=self.admin)
        response = self.client.get('/destinations/')
        self.assertContains(response, "Old Fort")
        self.assertNotContains(response, "Secret Fort")

    def test_pending_detail_redirects(self):
        """Test pending destination page bounces strangers"""
        destination = Destination.objects.create(name="Secret Fort", category=self.category, created_by=self.admin)
        response = self.client.get(f'/destinations/{destination.pk}/')
        self.assertRedirects(response, '/destinations/')

    def test_destination_list_ignores_bad_filters(self):
        """Test malformed filter ids still render the listing"""
        response = self.client.get('/destinations/', {'category': 'abc', 'subcategory': 'x', 'page': '99'})
        self.assertEqual(response.status_code, 200)


# ==================== MANAGEMENT COMMANDS ====================

class ManagementCommandTest(TestCase):
    """Test seed and cleanup commands"""

    def test_seed_data(self):
        """Test seeding categories, forms and accounts"""
        call_command('seed_data', stdout=StringIO())
        self.assertEqual(Category.objects.count(), 10)
        self.assertEqual(User.objects.filter(role=User.Role.SERVICE_PROVIDER).count(), 5)
        self.assertEqual(User.objects.filter(role=User.Role.USER).count(), 10)
        self.assertTrue(FormField.objects.exists())
        provider = User.objects.get(email='contact@ecoadventures.com')
        self.assertTrue(provider.check_password('password123'))
        self.assertEqual(provider.assigned_categories.count(), 2)

        call_command('seed_data', stdout=StringIO())
        self.assertEqual(Category.objects.count(), 10)

    def test_seed_dry_run(self):
        """Test dry run writes nothing"""
        call_command('seed_data', '--dry-run', stdout=StringIO())
        self.assertFalse(Category.objects.exists())

    def test_cleanup_tokens(self):
        """Test expired tokens and old views are removed"""
        PasswordResetToken.objects.create(
            email='a@example.com', token='expired', expires=timezone.now() - timedelta(hours=1),
        )
        PasswordResetToken.objects.create(
            email='b@example.com', token='fresh', expires=timezone.now() + timedelta(hours=1),
        )
        admin = make_user('admin@example.com', User.Role.ADMIN)
        destination = Destination.objects.create(
            name="Old Fort", category=Category.objects.create(name="Heritage"), created_by=admin,
        )
        View.objects.create(destination=destination, ip_address='1.2.3.4')
        View.objects.update(created_at=timezone.now() - timedelta(days=200))

        call_command('cleanup_tokens', stdout=StringIO())
        self.assertEqual(list(PasswordResetToken.objects.values_list('token', flat=True)), ['fresh'])
        self.assertFalse(View.objects.exists())
