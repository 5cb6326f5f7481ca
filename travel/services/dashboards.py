"""
Numbers for the three role dashboards.
"""
from django.contrib.auth import get_user_model
from django.db.models import Count

from ..models import Category, Comment, Destination, Like, Subcategory, View

User = get_user_model()


def _status_counts(qs):
    counts = {status: 0 for status in Destination.Status.values}
    for row in qs.values('status').annotate(total=Count('id')):
        counts[row['status']] = row['total']
    counts['TOTAL'] = sum(counts[s] for s in Destination.Status.values)
    return counts


def admin_stats():
    users = {role: 0 for role in User.Role.values}
    for row in User.objects.values('role').annotate(total=Count('id')):
        users[row['role']] = row['total']
    users['TOTAL'] = sum(users[r] for r in User.Role.values)

    return {
        'users': users,
        'destinations': _status_counts(Destination.objects.all()),
        'categories': Category.objects.count(),
        'subcategories': Subcategory.objects.count(),
        'comments': Comment.objects.count(),
        'likes': Like.objects.count(),
        'views': View.objects.count(),
    }


def pending_destinations(limit=5):
    return Destination.objects.filter(status=Destination.Status.PENDING) \
        .select_related('category', 'subcategory', 'created_by') \
        .order_by('created_at')[:limit]


def provider_stats(provider):
    own = Destination.objects.filter(created_by=provider)
    return {
        'destinations': _status_counts(own),
        'assignments': provider.assigned_categories.count(),
        'views': sum(own.values_list('view_count', flat=True)),
        'likes': Like.objects.filter(destination__created_by=provider).count(),
    }


def user_stats(user):
    return {
        'likes': user.likes.count(),
        'comments': user.comments.count(),
        'views': user.views.count(),
    }
