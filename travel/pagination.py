import math

from django.core.paginator import EmptyPage, Page
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class PagePagination(PageNumberPagination):
    """
    ``?page=&limit=`` pagination.

    Responses look like ``{"<results_key>": [...], "pagination": {...}}``.
    """

    page_size = 10
    page_size_query_param = 'limit'
    max_page_size = 100
    results_key = 'results'

    def __init__(self, results_key=None, page_size=None):
        if results_key:
            self.results_key = results_key
        if page_size:
            self.page_size = page_size

    def paginate_queryset(self, queryset, request, view=None):
        """Pages past the end come back empty instead of 404."""
        self.request = request
        paginator = self.django_paginator_class(queryset, self.get_page_size(request))
        try:
            number = max(int(request.query_params.get(self.page_query_param, 1)), 1)
        except (TypeError, ValueError):
            number = 1
        try:
            self.page = paginator.page(number)
        except EmptyPage:
            self.page = Page([], number, paginator)
        return list(self.page)

    def get_paginated_response(self, data):
        total = self.page.paginator.count
        limit = self.page.paginator.per_page
        return Response({
            self.results_key: data,
            'pagination': {
                'page': self.page.number,
                'limit': limit,
                'total': total,
                'pages': math.ceil(total / limit) if limit else 0,
            },
        })


def paginated_response(view, queryset, serializer_class, results_key, page_size=None, **serializer_kwargs):
    paginator = PagePagination(results_key=results_key, page_size=page_size)
    page = paginator.paginate_queryset(queryset, view.request, view=view)
    serializer = serializer_class(page, many=True, **serializer_kwargs)
    return paginator.get_paginated_response(serializer.data)
