import logging

from django.contrib import messages
from django.contrib.auth import login, logout
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import APIException, AuthenticationFailed, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from travel.exceptions import error_message
from travel.pagination import paginated_response

from . import services
from .forms import (
    ForgotPasswordForm, InviteUserForm, ResetPasswordForm, SignInForm, SignUpForm, UserEditForm,
)
from .models import User
from .permissions import IsAdminRole
from .serializers import AdminUserSerializer, UserSerializer, UserSummarySerializer

logger = logging.getLogger(__name__)


def token_pair(user):
    refresh = RefreshToken.for_user(user)
    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token)
    }


def authenticate_email(email, password):
    user = User.objects.filter(email__iexact=(email or '').strip()).first()
    if user is None or not user.is_active or not user.check_password(password):
        return None
    return user


# ----------------------------------------------------------------------
# Auth API
# ----------------------------------------------------------------------
class RegisterView(APIView):
    def post(self, request):
        serializer = UserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Registered %s", user.email)

        return Response({
            "user": UserSummarySerializer(user).data,
            "tokens": token_pair(user),
            "message": "Account created successfully"
        }, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    def post(self, request):
        email = request.data.get("email", None)
        password = request.data.get("password", None)
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = authenticate_email(email, password)
        if user is None:
            raise AuthenticationFailed("Invalid email or password")

        # Session cookie for the server-rendered pages
        login(request, user)

        return Response({
            "user": UserSummarySerializer(user).data,
            "tokens": token_pair(user),
            "redirect": user.dashboard_url
        })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    refresh_token = request.data.get("refresh")
    if refresh_token:
        try:
            RefreshToken(refresh_token).blacklist()
        except TokenError:
            return Response({"error": "Invalid token"}, status=400)

    logout(request)
    return Response({"message": "Logged out"})


@api_view(['POST'])
def forgot_password(request):
    message = services.request_password_reset(request.data.get("email"))
    return Response({"message": message})


@api_view(['POST'])
def reset_password(request):
    services.reset_password(request.data.get("token"), request.data.get("password"))
    return Response({"message": "Password reset successfully"})


# ----------------------------------------------------------------------
# Admin user management API
# ----------------------------------------------------------------------
class AdminUserListView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        qs = services.user_queryset(
            search=request.query_params.get('search'),
            role=request.query_params.get('role'),
        )
        return paginated_response(self, qs, AdminUserSerializer, 'users')


class AdminUserDetailView(APIView):
    permission_classes = [IsAdminRole]

    def put(self, request, user_id):
        user = services.get_user(user_id)
        user = services.update_user(
            request.user,
            user,
            name=request.data.get('name'),
            role=request.data.get('role'),
        )
        return Response({
            "message": "User updated successfully",
            "user": UserSummarySerializer(user).data,
        })

    def delete(self, request, user_id):
        user = services.get_user(user_id)
        label, deleted = services.delete_user(request.user, user)
        return Response({
            "message": f"User {label} has been deleted",
            "deleted_data": deleted,
        })


@api_view(['POST'])
@permission_classes([IsAdminRole])
def invite_user(request):
    email = request.data.get("email")
    user, email_sent = services.invite_user(
        email,
        request.data.get("role"),
        name=request.data.get("name"),
        message=request.data.get("message"),
    )
    body = {"user": UserSummarySerializer(user).data}
    if email_sent:
        body["message"] = f"Invitation sent to {user.email}"
    else:
        body["message"] = f"User created but invitation email failed. Please contact {user.email} manually."
        body["warning"] = "Email delivery failed"
    return Response(body, status=status.HTTP_201_CREATED)


# ----------------------------------------------------------------------
# Pages
# ----------------------------------------------------------------------
def _next_url(request, user):
    target = request.POST.get('next') or request.GET.get('next')
    if target and url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}):
        return target
    return user.dashboard_url


def signin_page(request):
    if request.user.is_authenticated:
        return redirect(request.user.dashboard_url)

    form = SignInForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        user = authenticate_email(form.cleaned_data['email'], form.cleaned_data['password'])
        if user is None:
            messages.error(request, "Invalid email or password")
        else:
            login(request, user)
            messages.success(request, f"Welcome back, {user.display_name}!")
            return redirect(_next_url(request, user))

    return render(request, 'users/signin.html', {'form': form, 'next': request.GET.get('next', '')})


def signup_page(request):
    form = SignUpForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        serializer = UserSerializer(data={
            'email': form.cleaned_data['email'],
            'password': form.cleaned_data['password'],
            'name': form.cleaned_data['name'],
        })
        if serializer.is_valid():
            user = serializer.save()
            login(request, user)
            messages.success(request, "Account created successfully")
            return redirect(user.dashboard_url)
        messages.error(request, error_message(serializer.errors))

    return render(request, 'users/signup.html', {'form': form})


def signout_page(request):
    logout(request)
    messages.info(request, "You have been signed out")
    return redirect('landing:home')


def forgot_password_page(request):
    form = ForgotPasswordForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        messages.success(request, services.request_password_reset(form.cleaned_data['email']))
        return redirect('users:signin')
    return render(request, 'users/forgot_password.html', {'form': form})


def reset_password_page(request):
    form = ResetPasswordForm(request.POST or None, initial={'token': request.GET.get('token', '')})
    if request.method == 'POST' and form.is_valid():
        try:
            services.reset_password(form.cleaned_data['token'], form.cleaned_data['password'])
        except APIException as e:
            messages.error(request, error_message(e.detail))
        else:
            messages.success(request, "Password reset successfully. Please sign in.")
            return redirect('users:signin')
    return render(request, 'users/reset_password.html', {'form': form})


def admin_users_page(request):
    form = InviteUserForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        try:
            user, email_sent = services.invite_user(**form.cleaned_data)
        except APIException as e:
            messages.error(request, error_message(e.detail))
        else:
            if email_sent:
                messages.success(request, f"Invitation sent to {user.email}")
            else:
                messages.warning(request, f"User created but invitation email failed. Please contact {user.email} manually.")
            return redirect('users:admin_users')

    search = request.GET.get('search', '')
    role = request.GET.get('role', '')
    users = services.user_queryset(search=search, role=role)
    return render(request, 'users/admin_users.html', {
        'users': users,
        'form': form,
        'search': search,
        'role': role,
        'roles': User.Role.choices,
    })


def admin_user_detail_page(request, user_id):
    try:
        user = services.get_user(user_id)
    except APIException as e:
        messages.error(request, error_message(e.detail))
        return redirect('users:admin_users')

    if request.method == 'POST' and request.POST.get('action') == 'delete':
        try:
            label, _ = services.delete_user(request.user, user)
        except APIException as e:
            messages.error(request, error_message(e.detail))
            return redirect('users:admin_user_detail', user_id=user.pk)
        messages.success(request, f"User {label} has been deleted")
        return redirect('users:admin_users')

    form = UserEditForm(request.POST or None, initial={'name': user.name, 'role': user.role})
    if request.method == 'POST' and form.is_valid():
        try:
            services.update_user(request.user, user, name=form.cleaned_data['name'], role=form.cleaned_data['role'])
        except APIException as e:
            messages.error(request, error_message(e.detail))
        else:
            messages.success(request, "User updated successfully")
            return redirect('users:admin_users')

    return render(request, 'users/admin_user_detail.html', {
        'profile': user,
        'form': form,
        'destinations': user.destinations.select_related('category')[:10],
        'assignments': user.assigned_categories.select_related('category', 'subcategory'),
    })
