from django.urls import path

from . import views

app_name = 'users'

urlpatterns = [
    # Auth API
    path('api/auth/register', views.RegisterView.as_view(), name='api_register'),
    path('api/auth/login', views.LoginView.as_view(), name='api_login'),
    path('api/auth/logout', views.logout_view, name='api_logout'),
    path('api/auth/forgot-password', views.forgot_password, name='api_forgot_password'),
    path('api/auth/reset-password', views.reset_password, name='api_reset_password'),

    # Admin user management API
    path('api/admin/users', views.AdminUserListView.as_view(), name='api_admin_users'),
    path('api/admin/users/invite', views.invite_user, name='api_admin_invite'),
    path('api/admin/users/<int:user_id>', views.AdminUserDetailView.as_view(), name='api_admin_user_detail'),

    # Pages
    path('auth/signin/', views.signin_page, name='signin'),
    path('auth/signup/', views.signup_page, name='signup'),
    path('auth/signout/', views.signout_page, name='signout'),
    path('auth/forgot-password/', views.forgot_password_page, name='forgot_password'),
    path('auth/reset-password/', views.reset_password_page, name='reset_password'),
    path('admin/users/', views.admin_users_page, name='admin_users'),
    path('admin/users/<int:user_id>/', views.admin_user_detail_page, name='admin_user_detail'),
]
