"""
Unit tests for Landing app
Covers: section upsert, enabled filtering, caching, admin-only writes
"""
from django.core.cache import cache
from django.test import TestCase, Client
from rest_framework import status
from rest_framework.test import APIClient

from users.models import User

from . import services
from .models import LandingPageConfig


class LandingServiceTest(TestCase):
    """Test section save semantics"""

    def setUp(self):
        cache.clear()

    def test_empty_section_default(self):
        """Test unsaved section serves an empty payload"""
        data = services.public_section('hero')
        self.assertEqual(data['section'], 'hero')
        self.assertIsNone(data['hero_headline'])
        self.assertEqual(data['hero_cards'], [])

    def test_upsert_keeps_untouched_scalars(self):
        """Test scalars missing from the payload are preserved"""
        services.save_section({'section': 'hero', 'hero_headline': 'Travel gently', 'hero_cta_text': 'Explore'})
        services.save_section({'section': 'hero', 'hero_headline': 'Travel lightly'})
        config = LandingPageConfig.objects.get(section='hero')
        self.assertEqual(config.hero_headline, 'Travel lightly')
        self.assertEqual(config.hero_cta_text, 'Explore')
        self.assertEqual(LandingPageConfig.objects.count(), 1)

    def test_cards_replaced_only_when_provided(self):
        """Test item lists are replaced only when sent"""
        services.save_section({'section': 'hero', 'hero_cards': [
            {'title': 'Forests', 'image': '/img/forest.jpg'},
            {'title': 'Rivers', 'image': '/img/river.jpg'},
        ]})
        config = LandingPageConfig.objects.get(section='hero')
        self.assertEqual(list(config.hero_cards.values_list('order', flat=True)), [0, 1])

        services.save_section({'section': 'hero', 'hero_headline': 'Hello'})
        self.assertEqual(config.hero_cards.count(), 2)

        services.save_section({'section': 'hero', 'hero_cards': []})
        self.assertEqual(config.hero_cards.count(), 0)

    def test_disabled_items_hidden_from_public(self):
        """Test public payload drops disabled items"""
        services.save_section({'section': 'experiences', 'experience_activities': [
            {'name': 'Kayaking', 'enabled': True},
            {'name': 'Night safari', 'enabled': False},
        ], 'experience_cards': [
            {'title': 'Backwaters', 'image': '/img/b.jpg', 'is_new': True, 'tour_count': '12 tours'},
        ]})
        data = services.public_section('experiences')
        self.assertEqual([a['name'] for a in data['experience_activities']], ['Kayaking'])
        self.assertTrue(data['experience_cards'][0]['is_new'])

    def test_save_invalidates_cache(self):
        """Test cached payload is refreshed after a save"""
        services.public_section('hero')
        services.save_section({'section': 'hero', 'hero_headline': 'Fresh'})
        self.assertEqual(services.public_section('hero')['hero_headline'], 'Fresh')

    def test_cards_must_be_a_list(self):
        """Test malformed item lists are rejected"""
        from rest_framework.exceptions import ValidationError
        with self.assertRaises(ValidationError):
            services.save_section({'section': 'hero', 'hero_cards': 'not a list'})


class LandingPageAPITest(TestCase):
    """Test landing page endpoint"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='secret123', role=User.Role.ADMIN
        )

    def test_get_is_public(self):
        """Test anyone can read a section"""
        response = self.client.get('/api/landing-page', {'section': 'experiences'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['section'], 'experiences')

    def test_post_requires_admin(self):
        """Test writes are admin only"""
        response = self.client.post('/api/landing-page', {'section': 'hero'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_admin_saves_section(self):
        """Test admin save returns every item including disabled ones"""
        self.client.force_authenticate(user=self.admin)
        response = self.client.put('/api/landing-page', {
            'section': 'hero',
            'hero_headline': 'Travel gently',
            'hero_cards': [{'title': 'Hidden', 'enabled': False}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['hero_cards']), 1)

        self.client.force_authenticate(user=None)
        response = self.client.get('/api/landing-page')
        self.assertEqual(response.data['hero_headline'], 'Travel gently')
        self.assertEqual(response.data['hero_cards'], [])


class HomePageTest(TestCase):
    """Test public home page"""

    def setUp(self):
        cache.clear()

    def test_home_renders(self):
        """Test home page renders with no config"""
        response = Client().get('/')
        self.assertEqual(response.status_code, 200)
