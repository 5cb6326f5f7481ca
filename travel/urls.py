from django.urls import path
from . import api, views

app_name = 'travel'

urlpatterns = [
    # Public pages
    path('destinations/', views.destination_list, name='destination_list'),
    path('destinations/<int:destination_id>/', views.destination_detail, name='destination_detail'),
    path('destinations/<int:destination_id>/like/', views.destination_like, name='destination_like'),
    path('destinations/<int:destination_id>/comment/', views.destination_comment, name='destination_comment'),

    # Admin area
    path('admin/dashboard/', views.admin_dashboard, name='admin_dashboard'),
    path('admin/categories/', views.admin_categories, name='admin_categories'),
    path('admin/categories/<int:category_id>/edit/', views.admin_category_edit, name='admin_category_edit'),
    path('admin/categories/<int:category_id>/form-config/', views.admin_form_config, name='admin_form_config'),
    path('admin/categories/<int:category_id>/subcategories/create/', views.admin_subcategory_create,
         name='admin_subcategory_create'),
    path('admin/categories/<int:category_id>/subcategories/<int:subcategory_id>/edit/', views.admin_subcategory_edit,
         name='admin_subcategory_edit'),
    path('admin/destinations/', views.admin_destinations, name='admin_destinations'),
    path('admin/destinations/create/', views.admin_destination_create, name='admin_destination_create'),
    path('admin/destinations/<int:destination_id>/edit/', views.admin_destination_edit, name='admin_destination_edit'),
    path('admin/destinations/<int:destination_id>/review/', views.admin_destination_review,
         name='admin_destination_review'),
    path('admin/destinations/<int:destination_id>/delete/', views.admin_destination_delete,
         name='admin_destination_delete'),
    path('admin/service-providers/', views.admin_service_providers, name='admin_service_providers'),

    # Service provider area
    path('sp/dashboard/', views.sp_dashboard, name='sp_dashboard'),
    path('sp/destinations/', views.sp_destinations, name='sp_destinations'),
    path('sp/destinations/create/', views.sp_destination_create, name='sp_destination_create'),

    # User area
    path('user/dashboard/', views.user_dashboard, name='user_dashboard'),

    # API endpoints
    path('api/categories', api.CategoryListView.as_view(), name='api_categories'),
    path('api/categories/<int:category_id>', api.CategoryDetailView.as_view(), name='api_category_detail'),
    path('api/categories/<int:category_id>/subcategories', api.create_subcategory, name='api_subcategories'),
    path('api/categories/<int:category_id>/subcategories/<int:subcategory_id>', api.SubcategoryDetailView.as_view(),
         name='api_subcategory_detail'),
    path('api/categories/<int:category_id>/form-fields', api.FormFieldsView.as_view(), name='api_form_fields'),
    path('api/destinations', api.DestinationListView.as_view(), name='api_destinations'),
    path('api/destinations/<int:destination_id>', api.DestinationDetailView.as_view(), name='api_destination_detail'),
    path('api/destinations/<int:destination_id>/approve', api.approve_destination, name='api_destination_approve'),
    path('api/destinations/<int:destination_id>/comments', api.CommentListView.as_view(), name='api_comments'),
    path('api/destinations/<int:destination_id>/like', api.LikeView.as_view(), name='api_like'),
    path('api/destinations/<int:destination_id>/likes', api.LikeListView.as_view(), name='api_likes'),
    path('api/destinations/<int:destination_id>/view', api.track_view, name='api_view'),
    path('api/destinations/<int:destination_id>/views', api.ViewListView.as_view(), name='api_views'),
    path('api/upload', api.upload_image, name='api_upload'),
    path('api/geocode', api.geocode_view, name='api_geocode'),
    path('api/admin/service-providers/<int:provider_id>/categories', api.AssignmentView.as_view(),
         name='api_assignments'),
    path('api/admin/stats', api.admin_stats, name='api_admin_stats'),
]
