from django.conf import settings
from django.db import models
from django.db.models.functions import Lower
from django.utils.text import slugify
from taggit.managers import TaggableManager


# ----------------------------------------------------------------------
# 1. Category Model
# ----------------------------------------------------------------------
class Category(models.Model):
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=120, unique=True, blank=True)
    description = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Categories"
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(Lower('name'), name='unique_category_name_ci'),
        ]

    def save(self, *args, **kwargs):
        if not self.slug:
            base_slug = slugify(self.name) or 'category'
            slug = base_slug
            count = 1
            while Category.objects.filter(slug=slug).exclude(pk=self.pk).exists():
                slug = f"{base_slug}-{count}"
                count += 1
            self.slug = slug
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


# ----------------------------------------------------------------------
# 2. Subcategory Model
# ----------------------------------------------------------------------
class Subcategory(models.Model):
    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name='subcategories'
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Subcategories"
        ordering = ['name']
        constraints = [
            models.UniqueConstraint('category', Lower('name'), name='unique_subcategory_name_per_category_ci'),
        ]

    def __str__(self):
        return f"{self.category.name} / {self.name}"


# ----------------------------------------------------------------------
# 3. Destination Model
# ----------------------------------------------------------------------
class Destination(models.Model):
    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        APPROVED = 'APPROVED', 'Approved'
        REJECTED = 'REJECTED', 'Rejected'

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    latitude = models.FloatField(default=0.0)
    longitude = models.FloatField(default=0.0)
    pickup_location = models.CharField(max_length=255, blank=True)

    price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    base_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    markup_percentage = models.DecimalField(max_digits=6, decimal_places=2, default=0)
    final_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    image_url = models.URLField(max_length=500, blank=True)
    custom_fields = models.JSONField(default=dict, blank=True)
    tags = TaggableManager(blank=True)

    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name='destinations'
    )
    subcategory = models.ForeignKey(
        Subcategory,
        on_delete=models.PROTECT,
        related_name='destinations',
        null=True,
        blank=True
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='destinations'
    )

    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='approved_destinations',
        null=True,
        blank=True
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, null=True)

    rating = models.FloatField(default=0.0)
    view_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    @property
    def display_price(self):
        return self.final_price or self.price

    def is_visible_to(self, user):
        if self.status == self.Status.APPROVED:
            return True
        if not user or not user.is_authenticated:
            return False
        return user.is_admin or self.created_by_id == user.pk

    def __str__(self):
        return self.name


# ----------------------------------------------------------------------
# 4. Engagement: comments, likes, views
# ----------------------------------------------------------------------
class Comment(models.Model):
    destination = models.ForeignKey(Destination, on_delete=models.CASCADE, related_name='comments')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='comments')
    content = models.TextField()
    rating = models.PositiveSmallIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['destination', 'user'], name='one_comment_per_user'),
        ]

    def __str__(self):
        return f"{self.user} on {self.destination}"


class Like(models.Model):
    destination = models.ForeignKey(Destination, on_delete=models.CASCADE, related_name='likes')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='likes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        unique_together = ('destination', 'user')

    def __str__(self):
        return f"{self.user} likes {self.destination}"


class View(models.Model):
    destination = models.ForeignKey(Destination, on_delete=models.CASCADE, related_name='views')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='views',
        null=True,
        blank=True
    )
    ip_address = models.CharField(max_length=64, blank=True, null=True)
    user_agent = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"View of {self.destination} by {self.user or self.ip_address}"


# ----------------------------------------------------------------------
# 5. Per-category dynamic form schema
# ----------------------------------------------------------------------
class FormField(models.Model):
    class FieldType(models.TextChoices):
        TEXT = 'text', 'Text Input'
        TEXTAREA = 'textarea', 'Text Area'
        NUMBER = 'number', 'Number'
        DATE = 'date', 'Date'
        TIME = 'time', 'Time'
        DATETIME = 'dateTime', 'Date & Time'
        LOCATION = 'location', 'Location'
        IMAGE = 'image', 'Image Upload'
        SELECT = 'select', 'Select Dropdown'
        RADIO = 'radio', 'Radio Buttons'
        CHECKBOX = 'checkbox', 'Checkbox'

    class Width(models.TextChoices):
        HALF = 'half', 'Half Width'
        FULL = 'full', 'Full Width'

    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name='form_fields')
    name = models.CharField(max_length=100)
    label = models.CharField(max_length=150)
    field_type = models.CharField(max_length=20, choices=FieldType.choices, default=FieldType.TEXT)
    required = models.BooleanField(default=False)
    placeholder = models.CharField(max_length=255, blank=True)
    options = models.TextField(blank=True, help_text="One option per line (select and radio fields).")
    order = models.PositiveIntegerField(default=0)
    width = models.CharField(max_length=4, choices=Width.choices, default=Width.FULL)

    class Meta:
        ordering = ['order', 'id']
        unique_together = ('category', 'name')

    def __str__(self):
        return f"{self.category.name}: {self.label}"


# ----------------------------------------------------------------------
# 6. Service provider <-> category assignments
# ----------------------------------------------------------------------
class ServiceProviderCategory(models.Model):
    service_provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='assigned_categories'
    )
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name='provider_assignments')
    subcategory = models.ForeignKey(
        Subcategory,
        on_delete=models.CASCADE,
        related_name='provider_assignments',
        null=True,
        blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Service provider categories"
        ordering = ['category__name', 'subcategory__name']
        unique_together = ('service_provider', 'category', 'subcategory')

    def __str__(self):
        scope = self.subcategory.name if self.subcategory else 'all subcategories'
        return f"{self.service_provider} -> {self.category.name} ({scope})"
