"""
Management command to seed categories, default destination forms and
demo accounts (admin, service providers with assignments, users).
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from travel import form_engine
from travel.models import Category, ServiceProviderCategory, Subcategory
from users.models import User

CATEGORIES = [
    ('Eco Tours', 'Environmentally conscious tours focusing on nature and sustainability', [
        'Wildlife Watching', 'Bird Watching', 'Nature Photography', 'Forest Hiking',
        'Marine Conservation', 'Eco-Friendly Transportation',
    ]),
    ('Adventures', 'Thrilling outdoor activities and adventure sports', [
        'Rock Climbing', 'White Water Rafting', 'Mountain Biking', 'Paragliding',
        'Scuba Diving', 'Trekking', 'Zip-lining',
    ]),
    ('Eco Stays', 'Sustainable accommodation options', [
        'Eco Lodges', 'Tree Houses', 'Camping', 'Farm Stays',
        'Solar Powered Accommodations', 'Zero Waste Hotels',
    ]),
    ('Heritage Tours', 'Cultural and historical site visits', [
        'Historical Monuments', 'Archaeological Sites', 'Museums', 'Traditional Villages',
        'UNESCO World Heritage Sites', 'Cultural Landmarks',
    ]),
    ('Cultural Tours', 'Immersive cultural experiences', [
        'Local Festivals', 'Traditional Crafts', 'Cultural Performances', 'Local Cuisine',
        'Art Galleries', 'Traditional Music',
    ]),
    ('Wellness Tours', 'Health and wellness focused experiences', [
        'Yoga Retreats', 'Meditation Centers', 'Spa Treatments', 'Ayurvedic Therapies',
        'Mindfulness Workshops', 'Nature Therapy',
    ]),
    ('Community Exploration', 'Community-based tourism experiences', [
        'Village Tours', 'Local Community Projects', 'Social Impact Tours', 'Community Workshops',
        'Local Guide Experiences', 'Cultural Exchange Programs',
    ]),
    ('Sustainable Tour Itineraries', 'Comprehensive sustainable travel packages', [
        'Multi-day Eco Tours', 'Carbon Neutral Travel', 'Sustainable Transportation',
        'Green Travel Packages', 'Eco-Friendly Itineraries', 'Sustainable Travel Planning',
    ]),
    ('Buy from Local', 'Supporting local businesses and artisans', [
        'Local Markets', 'Artisan Workshops', 'Local Food Tours', 'Handicraft Shopping',
        'Local Product Tours', 'Fair Trade Shopping',
    ]),
    ('Learning Trips', 'Educational and skill-building experiences', [
        'Language Learning', 'Cooking Classes', 'Traditional Skills', 'Environmental Education',
        'Cultural Workshops', 'Professional Development',
    ]),
]

ADMIN = ('Admin User', 'admin@sustainabletourism.com', '+1-555-0001')

# (name, email, phone, category names assigned with all subcategories)
SERVICE_PROVIDERS = [
    ('Eco Adventures Co.', 'contact@ecoadventures.com', '+1-555-1001', ['Adventures', 'Eco Tours']),
    ('Green Stay Lodges', 'info@greenstay.com', '+1-555-1002', ['Eco Stays']),
    ('Cultural Heritage Tours', 'tours@culturalheritage.com', '+1-555-1003', ['Heritage Tours', 'Cultural Tours']),
    ('Wellness Retreat Center', 'retreat@wellnesscenter.com', '+1-555-1004', ['Wellness Tours']),
    ('Local Artisan Collective', 'artisans@localcollective.com', '+1-555-1005', ['Buy from Local']),
]

USERS = [
    ('Alice Johnson', 'alice.johnson@email.com'),
    ('Bob Smith', 'bob.smith@email.com'),
    ('Carol Davis', 'carol.davis@email.com'),
    ('David Wilson', 'david.wilson@email.com'),
    ('Emma Brown', 'emma.brown@email.com'),
    ('Frank Miller', 'frank.miller@email.com'),
    ('Grace Lee', 'grace.lee@email.com'),
    ('Henry Taylor', 'henry.taylor@email.com'),
    ('Iris Garcia', 'iris.garcia@email.com'),
    ('Jack Anderson', 'jack.anderson@email.com'),
]


class Command(BaseCommand):
    help = 'Seed categories, default form fields and demo accounts'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            default='password123',
            help='Password for every seeded account (default: password123)',
        )
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete existing assignments, subcategories and categories without destinations first',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be created without writing anything',
        )

    def handle(self, *args, **options):
        password = options['password']

        self.stdout.write('\n=== Seeding data ===')
        self.stdout.write(f'Categories: {len(CATEGORIES)}')
        self.stdout.write(f'Subcategories: {sum(len(subs) for _, _, subs in CATEGORIES)}')
        self.stdout.write(f'Accounts: 1 admin, {len(SERVICE_PROVIDERS)} service providers, {len(USERS)} users')

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('\n[DRY RUN] Nothing was written.'))
            return

        with transaction.atomic():
            if options['clear']:
                self._clear()
            categories = self._seed_categories()
            self._seed_accounts(categories, password)

        self.stdout.write(self.style.SUCCESS('\n✓ Seed data created successfully'))
        self.stdout.write(f'All seeded accounts use password: {password}')

    def _clear(self):
        ServiceProviderCategory.objects.all().delete()
        deleted, _ = Subcategory.objects.filter(destinations__isnull=True).delete()
        self.stdout.write(f'Removed {deleted} subcategory rows')
        deleted, _ = Category.objects.filter(destinations__isnull=True, subcategories__isnull=True).delete()
        self.stdout.write(f'Removed {deleted} category rows')

    def _seed_categories(self):
        categories = {}
        for name, description, subcategories in CATEGORIES:
            category = Category.objects.filter(name__iexact=name).first()
            if category is None:
                category = Category.objects.create(name=name, description=description)
                self.stdout.write(f'  + {name}')
            for sub_name in subcategories:
                if not category.subcategories.filter(name__iexact=sub_name).exists():
                    Subcategory.objects.create(category=category, name=sub_name)
            if not category.form_fields.exists():
                form_engine.replace_form_fields(category, form_engine.DEFAULT_FORM_FIELDS)
            categories[name] = category
        return categories

    def _account(self, name, email, role, password, phone=''):
        user = User.objects.filter(email=email).first()
        if user is None:
            user = User.objects.create_user(email=email, password=password, name=name, role=role, phone=phone)
            self.stdout.write(f'  + {role.lower()}: {email}')
        return user

    def _seed_accounts(self, categories, password):
        name, email, phone = ADMIN
        admin = self._account(name, email, User.Role.ADMIN, password, phone)
        if not admin.is_staff:
            admin.is_staff = True
            admin.is_superuser = True
            admin.save(update_fields=['is_staff', 'is_superuser'])

        for name, email, phone, category_names in SERVICE_PROVIDERS:
            provider = self._account(name, email, User.Role.SERVICE_PROVIDER, password, phone)
            for category_name in category_names:
                ServiceProviderCategory.objects.get_or_create(
                    service_provider=provider,
                    category=categories[category_name],
                    subcategory=None,
                )

        for name, email in USERS:
            self._account(name, email, User.Role.USER, password)
