from django.contrib import admin
from django.utils import timezone
from .models import Category, Comment, Destination, FormField, Like, ServiceProviderCategory, Subcategory, View

# ----------------------------------------------------
# 1. Inlines for Category
# ----------------------------------------------------
class SubcategoryInline(admin.TabularInline):
    model = Subcategory
    extra = 1


class FormFieldInline(admin.TabularInline):
    model = FormField
    extra = 0
    fields = ('order', 'name', 'label', 'field_type', 'required', 'width', 'options')
    ordering = ('order',)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'created_at')
    search_fields = ('name',)
    prepopulated_fields = {'slug': ('name',)}
    inlines = [SubcategoryInline, FormFieldInline]


@admin.register(Subcategory)
class SubcategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'created_at')
    list_filter = ('category',)
    search_fields = ('name', 'category__name')


# ----------------------------------------------------
# 2. Destination Admin
# ----------------------------------------------------
class CommentInline(admin.TabularInline):
    model = Comment
    extra = 0
    fields = ('user', 'rating', 'content', 'created_at')
    readonly_fields = ('created_at',)


@admin.register(Destination)
class DestinationAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'subcategory', 'status', 'created_by', 'final_price', 'view_count', 'get_tags')
    list_filter = ('status', 'category')
    search_fields = ('name', 'location', 'description')
    readonly_fields = ('approved_at', 'rating', 'view_count', 'created_at', 'updated_at')
    inlines = [CommentInline]
    actions = ['approve_selected']

    def get_tags(self, obj):
        return ", ".join(o.name for o in obj.tags.all())
    get_tags.short_description = 'Tags'

    @admin.action(description="Approve selected pending destinations")
    def approve_selected(self, request, queryset):
        updated = queryset.filter(status=Destination.Status.PENDING).update(
            status=Destination.Status.APPROVED,
            approved_by=request.user,
            approved_at=timezone.now(),
            rejection_reason=None,
        )
        self.message_user(request, f"{updated} destination(s) approved")


# ----------------------------------------------------
# 3. Engagement & assignments
# ----------------------------------------------------
@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ('destination', 'user', 'rating', 'created_at')
    search_fields = ('content', 'user__email', 'destination__name')


@admin.register(Like)
class LikeAdmin(admin.ModelAdmin):
    list_display = ('destination', 'user', 'created_at')


@admin.register(View)
class ViewAdmin(admin.ModelAdmin):
    list_display = ('destination', 'user', 'ip_address', 'created_at')
    list_filter = ('created_at',)


@admin.register(ServiceProviderCategory)
class ServiceProviderCategoryAdmin(admin.ModelAdmin):
    list_display = ('service_provider', 'category', 'subcategory', 'created_at')
    list_filter = ('category',)
    search_fields = ('service_provider__email', 'category__name')
