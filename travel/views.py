import logging

from django.contrib import messages
from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST
from rest_framework.exceptions import APIException

from . import form_engine
from .exceptions import error_message
from .forms import (
    AssignmentForm, CategoryForm, CommentForm, DestinationEditForm, FormFieldFormSet, ReviewForm, SubcategoryForm,
)
from .models import Category, Destination
from .pricing import markup_amount
from .services import assignments, catalog, dashboards, destinations, engagement

logger = logging.getLogger(__name__)

User = get_user_model()

PAGE_SIZE = 12


def _fail(request, exc):
    messages.error(request, error_message(exc.detail))


def _page(request, qs, per_page=PAGE_SIZE):
    return Paginator(qs, per_page).get_page(request.GET.get('page'))


# ----------------------------
# Public destination pages
# ----------------------------
def destination_list(request):
    category = request.GET.get('category') or None
    subcategory = request.GET.get('subcategory') or None
    search = request.GET.get('search', '').strip()
    tag = request.GET.get('tag') or None

    qs = destinations.visible_queryset(request.user)
    qs = destinations.filter_destinations(qs, category=category, subcategory=subcategory, search=search, tag=tag)

    return render(request, 'travel/destination_list.html', {
        'page_obj': _page(request, qs),
        'categories': catalog.category_queryset(),
        'selected_category': category,
        'selected_subcategory': subcategory,
        'search': search,
        'tag': tag,
    })


def destination_detail(request, destination_id):
    try:
        destination = destinations.get_visible_destination(destination_id, request.user)
    except APIException as e:
        _fail(request, e)
        return redirect('travel:destination_list')

    view_info = engagement.record_view(request, destination)

    comments = destination.comments.select_related('user')
    user_has_commented = request.user.is_authenticated and comments.filter(user=request.user).exists()

    return render(request, 'travel/destination_detail.html', {
        'destination': destination,
        'view_count': view_info['view_count'],
        'comments': comments,
        'comment_form': CommentForm(),
        'user_has_commented': user_has_commented,
        'liked': engagement.has_liked(request.user, destination),
        'like_count': engagement.like_count(destination),
    })


@login_required
@require_POST
def destination_like(request, destination_id):
    try:
        destination = destinations.get_visible_destination(destination_id, request.user)
        result = engagement.toggle_like(request.user, destination)
    except APIException as e:
        _fail(request, e)
    else:
        messages.success(request, "Added to your likes" if result['liked'] else "Removed from your likes")
    return redirect('travel:destination_detail', destination_id=destination_id)


@login_required
@require_POST
def destination_comment(request, destination_id):
    form = CommentForm(request.POST)
    if not form.is_valid():
        messages.error(request, error_message(form.errors))
        return redirect('travel:destination_detail', destination_id=destination_id)
    try:
        destination = destinations.get_visible_destination(destination_id, request.user)
        engagement.add_comment(request.user, destination, form.cleaned_data['content'], form.cleaned_data['rating'])
    except APIException as e:
        _fail(request, e)
    else:
        messages.success(request, "Comment added successfully")
    return redirect('travel:destination_detail', destination_id=destination_id)


# ----------------------------
# Dynamic destination form (admin + service provider)
# ----------------------------
def _allowed_categories(user):
    """(category, [subcategories]) pairs the user may submit into."""
    if user.is_admin:
        return [(c, list(c.subcategories.all())) for c in Category.objects.prefetch_related('subcategories')]
    return [(e['category'], e['subcategories']) for e in assignments.assigned_categories(user)]


def _create_destination_page(request, template, success_url):
    allowed = _allowed_categories(request.user)
    source = request.POST if request.method == 'POST' else request.GET
    category_id = source.get('category') or ''
    subcategory_id = source.get('subcategory') or ''

    category = next((c for c, _ in allowed if str(c.pk) == category_id), None)
    subcategories = next((subs for c, subs in allowed if c == category), [])

    context = {
        'allowed': allowed,
        'category': category,
        'subcategories': subcategories,
        'subcategory_id': subcategory_id,
    }

    if category is None:
        if category_id:
            messages.error(request, "You do not have permission to create destinations in this category")
        return render(request, template, context)

    fields = form_engine.fields_for_category(category)
    form_class = form_engine.build_form_class(fields)
    form = form_class(request.POST or None, request.FILES or None)

    if request.method == 'POST':
        try:
            destination = destinations.create_destination(
                request.user, request.POST, request.FILES, request=request
            )
        except APIException as e:
            _fail(request, e)
        else:
            if destination.status == Destination.Status.APPROVED:
                messages.success(request, f"\"{destination.name}\" is now live")
            else:
                messages.success(request, f"\"{destination.name}\" was submitted for approval")
            return redirect(success_url)

    context['form'] = form
    context['rows'] = [
        [(form[field.name], field) for field in row]
        for row in form_engine.layout_rows(form.definitions)
    ]
    return render(request, template, context)


# ----------------------------
# Admin area
# ----------------------------
def admin_dashboard(request):
    return render(request, 'travel/admin/dashboard.html', {
        'stats': dashboards.admin_stats(),
        'pending': dashboards.pending_destinations(),
    })


def admin_categories(request):
    form = CategoryForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        try:
            category = catalog.create_category(form.cleaned_data['name'], form.cleaned_data['description'])
        except APIException as e:
            _fail(request, e)
        else:
            messages.success(request, f"Category \"{category.name}\" created")
            return redirect('travel:admin_categories')

    return render(request, 'travel/admin/categories.html', {
        'categories': catalog.category_queryset(),
        'form': form,
    })


def admin_category_edit(request, category_id):
    try:
        category = catalog.get_category(category_id)
    except APIException as e:
        _fail(request, e)
        return redirect('travel:admin_categories')

    if request.method == 'POST' and request.POST.get('action') == 'delete':
        try:
            catalog.delete_category(category)
        except APIException as e:
            _fail(request, e)
            return redirect('travel:admin_category_edit', category_id=category.pk)
        messages.success(request, "Category deleted successfully")
        return redirect('travel:admin_categories')

    form = CategoryForm(request.POST or None, initial={'name': category.name, 'description': category.description})
    if request.method == 'POST' and form.is_valid():
        try:
            catalog.update_category(category, form.cleaned_data['name'], form.cleaned_data['description'])
        except APIException as e:
            _fail(request, e)
        else:
            messages.success(request, "Category updated successfully")
            return redirect('travel:admin_categories')

    return render(request, 'travel/admin/category_edit.html', {
        'category': category,
        'form': form,
        'subcategories': category.subcategories.all(),
    })


def admin_subcategory_create(request, category_id):
    try:
        category = catalog.get_category(category_id)
    except APIException as e:
        _fail(request, e)
        return redirect('travel:admin_categories')

    form = SubcategoryForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        try:
            catalog.create_subcategory(category, form.cleaned_data['name'], form.cleaned_data['description'])
        except APIException as e:
            _fail(request, e)
        else:
            messages.success(request, "Subcategory created successfully")
            return redirect('travel:admin_category_edit', category_id=category.pk)

    return render(request, 'travel/admin/subcategory_form.html', {'category': category, 'form': form})


def admin_subcategory_edit(request, category_id, subcategory_id):
    try:
        category = catalog.get_category(category_id)
        subcategory = catalog.get_subcategory(category, subcategory_id)
    except APIException as e:
        _fail(request, e)
        return redirect('travel:admin_categories')

    if request.method == 'POST' and request.POST.get('action') == 'delete':
        try:
            catalog.delete_subcategory(subcategory)
        except APIException as e:
            _fail(request, e)
        else:
            messages.success(request, "Subcategory deleted successfully")
        return redirect('travel:admin_category_edit', category_id=category.pk)

    form = SubcategoryForm(request.POST or None, initial={
        'name': subcategory.name, 'description': subcategory.description,
    })
    if request.method == 'POST' and form.is_valid():
        try:
            catalog.update_subcategory(subcategory, form.cleaned_data['name'], form.cleaned_data['description'])
        except APIException as e:
            _fail(request, e)
        else:
            messages.success(request, "Subcategory updated successfully")
            return redirect('travel:admin_category_edit', category_id=category.pk)

    return render(request, 'travel/admin/subcategory_form.html', {
        'category': category,
        'subcategory': subcategory,
        'form': form,
    })


def admin_form_config(request, category_id):
    try:
        category = catalog.get_category(category_id)
    except APIException as e:
        _fail(request, e)
        return redirect('travel:admin_categories')

    if request.method == 'POST' and request.POST.get('action') == 'load_defaults':
        form_engine.replace_form_fields(category, form_engine.DEFAULT_FORM_FIELDS)
        messages.success(request, "Default fields loaded")
        return redirect('travel:admin_form_config', category_id=category.pk)

    fields = form_engine.fields_for_category(category)
    initial = [
        {
            'name': f.name, 'label': f.label, 'field_type': f.field_type, 'required': f.required,
            'placeholder': f.placeholder, 'options': f.options, 'order': f.order, 'width': f.width,
        }
        for f in fields
    ]
    formset = FormFieldFormSet(request.POST or None, initial=initial)

    if request.method == 'POST' and formset.is_valid():
        definitions = [
            form.cleaned_data for form in formset.forms
            if form.cleaned_data and not form.cleaned_data.get('DELETE')
        ]
        try:
            form_engine.replace_form_fields(category, definitions)
        except APIException as e:
            _fail(request, e)
        else:
            messages.success(request, "Form configuration saved")
            return redirect('travel:admin_form_config', category_id=category.pk)

    return render(request, 'travel/admin/form_config.html', {
        'category': category,
        'formset': formset,
        'is_default': not any(f.pk for f in fields),
        'preview_rows': form_engine.layout_rows(fields),
    })


def admin_destinations(request):
    status = request.GET.get('status') or None
    qs = destinations.visible_queryset(request.user, status=status)
    qs = destinations.filter_destinations(qs, search=request.GET.get('search'))
    return render(request, 'travel/admin/destinations.html', {
        'page_obj': _page(request, qs),
        'status': status,
        'statuses': Destination.Status.choices,
        'review_form': ReviewForm(),
    })


@require_POST
def admin_destination_review(request, destination_id):
    form = ReviewForm(request.POST)
    if not form.is_valid():
        messages.error(request, error_message(form.errors))
        return redirect('travel:admin_destinations')
    try:
        destination = destinations.review_destination(
            request.user,
            destinations.get_destination(destination_id),
            form.cleaned_data['action'],
            form.cleaned_data['rejection_reason'],
        )
    except APIException as e:
        _fail(request, e)
    else:
        messages.success(request, f"\"{destination.name}\" {destination.get_status_display().lower()}")
    return redirect('travel:admin_destinations')


@require_POST
def admin_destination_delete(request, destination_id):
    try:
        destinations.delete_destination(request.user, destinations.get_destination(destination_id))
    except APIException as e:
        _fail(request, e)
    else:
        messages.success(request, "Destination deleted successfully")
    return redirect('travel:admin_destinations')


def admin_destination_create(request):
    return _create_destination_page(request, 'travel/destination_create.html', 'travel:admin_destinations')


def admin_destination_edit(request, destination_id):
    try:
        destination = destinations.get_destination(destination_id)
    except APIException as e:
        _fail(request, e)
        return redirect('travel:admin_destinations')

    form = DestinationEditForm(request.POST or None, initial=DestinationEditForm.initial_for(destination))
    if request.method == 'POST' and form.is_valid():
        data = dict(form.cleaned_data)
        data['category'] = data['category'].pk
        data['subcategory'] = data['subcategory'].pk if data['subcategory'] else ''
        try:
            destinations.update_destination(request.user, destination, data)
        except APIException as e:
            _fail(request, e)
        else:
            messages.success(request, "Destination updated successfully")
            return redirect('travel:admin_destinations')

    return render(request, 'travel/admin/destination_edit.html', {
        'destination': destination,
        'form': form,
        'markup': markup_amount(destination.base_price, destination.markup_percentage),
    })


def admin_service_providers(request):
    if request.method == 'POST':
        try:
            provider = assignments.get_service_provider(request.POST.get('provider'))
            if request.POST.get('action') == 'remove':
                assignments.remove_assignment(provider, request.POST.get('assignment'))
                messages.success(request, "Category assignment removed successfully")
            else:
                form = AssignmentForm(request.POST)
                if form.is_valid():
                    sub = form.cleaned_data['subcategory']
                    assignments.assign_category(provider, form.cleaned_data['category'].pk, sub.pk if sub else None)
                    messages.success(request, "Category assigned successfully")
                else:
                    messages.error(request, error_message(form.errors))
        except APIException as e:
            _fail(request, e)
        return redirect('travel:admin_service_providers')

    providers = User.objects.filter(role=User.Role.SERVICE_PROVIDER).prefetch_related(
        'assigned_categories__category', 'assigned_categories__subcategory'
    ).order_by('email')
    return render(request, 'travel/admin/service_providers.html', {
        'providers': providers,
        'form': AssignmentForm(),
    })


# ----------------------------
# Service provider area
# ----------------------------
def sp_dashboard(request):
    return render(request, 'travel/sp/dashboard.html', {
        'stats': dashboards.provider_stats(request.user),
        'assigned': assignments.assigned_categories(request.user),
        'recent': request.user.destinations.select_related('category', 'subcategory')[:5],
    })


def sp_destinations(request):
    status = request.GET.get('status') or None
    qs = request.user.destinations.select_related('category', 'subcategory')
    if status:
        qs = qs.filter(status=status)
    return render(request, 'travel/sp/destinations.html', {
        'page_obj': _page(request, qs),
        'status': status,
        'statuses': Destination.Status.choices,
    })


def sp_destination_create(request):
    return _create_destination_page(request, 'travel/destination_create.html', 'travel:sp_destinations')


# ----------------------------
# User area
# ----------------------------
def user_dashboard(request):
    user = request.user
    return render(request, 'travel/user/dashboard.html', {
        'stats': dashboards.user_stats(user),
        'liked': Destination.objects.filter(likes__user=user).select_related('category')[:12],
        'comments': user.comments.select_related('destination')[:10],
        'recently_viewed': user.views.select_related('destination')[:10],
    })
