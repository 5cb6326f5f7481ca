from django.urls import path

from . import views

app_name = 'landing'

urlpatterns = [
    path('', views.home, name='home'),
    path('admin/landing-page/', views.admin_landing_page, name='admin_landing_page'),
    path('api/landing-page', views.LandingPageView.as_view(), name='api_landing_page'),
]
