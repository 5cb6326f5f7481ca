"""
JSON API for categories, destinations and engagement.
"""
import logging

from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import SAFE_METHODS, AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import IsAdminRole, IsProviderOrAdmin

from . import form_engine
from .pagination import paginated_response
from .serializers import (
    AssignmentSerializer, CategoryRefSerializer, CategorySerializer, CommentSerializer,
    DestinationSerializer, FormFieldSerializer, LikeSerializer, SubcategorySerializer, ViewSerializer,
)
from .services import assignments, catalog, dashboards, destinations, engagement
from .services.geocoding import geocode
from .services.storage import save_image

logger = logging.getLogger(__name__)


class AdminWriteMixin:
    """Anyone may read; only admins may write."""

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [AllowAny()]
        return [IsAdminRole()]


# ----------------------------------------------------------------------
# Categories
# ----------------------------------------------------------------------
class CategoryListView(AdminWriteMixin, APIView):
    def get(self, request):
        data = catalog.cached_category_tree(lambda qs: CategorySerializer(qs, many=True).data)
        return Response({'categories': data})

    def post(self, request):
        category = catalog.create_category(request.data.get('name'), request.data.get('description'))
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)


class CategoryDetailView(AdminWriteMixin, APIView):
    def get(self, request, category_id):
        return Response(CategorySerializer(catalog.get_category(category_id)).data)

    def put(self, request, category_id):
        category = catalog.update_category(
            catalog.get_category(category_id),
            request.data.get('name'),
            request.data.get('description'),
        )
        return Response(CategorySerializer(category).data)

    def delete(self, request, category_id):
        catalog.delete_category(catalog.get_category(category_id))
        return Response({'message': 'Category deleted successfully'})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def create_subcategory(request, category_id):
    category = catalog.get_category(category_id)
    subcategory = catalog.create_subcategory(category, request.data.get('name'), request.data.get('description'))
    return Response(SubcategorySerializer(subcategory).data, status=status.HTTP_201_CREATED)


class SubcategoryDetailView(APIView):
    permission_classes = [IsAdminRole]

    def put(self, request, category_id, subcategory_id):
        subcategory = catalog.get_subcategory(catalog.get_category(category_id), subcategory_id)
        subcategory = catalog.update_subcategory(
            subcategory, request.data.get('name'), request.data.get('description')
        )
        return Response(SubcategorySerializer(subcategory).data)

    def delete(self, request, category_id, subcategory_id):
        subcategory = catalog.get_subcategory(catalog.get_category(category_id), subcategory_id)
        catalog.delete_subcategory(subcategory)
        return Response({'message': 'Subcategory deleted successfully'})


class FormFieldsView(AdminWriteMixin, APIView):
    def _payload(self, category, fields, is_default):
        data = FormFieldSerializer(fields, many=True).data
        by_name = {item['name']: item for item in data}
        return {
            'category': CategoryRefSerializer(category).data,
            'is_default': is_default,
            'fields': data,
            'rows': [
                [by_name[f.name] for f in row]
                for row in form_engine.layout_rows(fields)
            ],
        }

    def get(self, request, category_id):
        category = catalog.get_category(category_id)
        fields = form_engine.fields_for_category(category)
        is_default = not any(f.pk for f in fields)
        return Response(self._payload(category, fields, is_default))

    def put(self, request, category_id):
        category = catalog.get_category(category_id)
        definitions = request.data.get('fields')
        if not isinstance(definitions, list):
            raise ValidationError("fields must be a list")
        fields = form_engine.replace_form_fields(category, definitions)
        return Response(self._payload(category, fields, False))


# ----------------------------------------------------------------------
# Destinations
# ----------------------------------------------------------------------
class DestinationListView(APIView):
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [AllowAny()]
        return [IsProviderOrAdmin()]

    def get(self, request):
        params = request.query_params
        qs = destinations.visible_queryset(request.user, status=params.get('status'))
        qs = destinations.filter_destinations(
            qs,
            category=params.get('category'),
            subcategory=params.get('subcategory'),
            search=params.get('search'),
            tag=params.get('tag'),
        )
        return paginated_response(self, qs, DestinationSerializer, 'destinations')

    def post(self, request):
        destination = destinations.create_destination(
            request.user, request.data, request.FILES, request=request
        )
        return Response(DestinationSerializer(destination).data, status=status.HTTP_201_CREATED)


class DestinationDetailView(APIView):
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [AllowAny()]
        return [IsAdminRole()]

    def get(self, request, destination_id):
        destination = destinations.get_visible_destination(destination_id, request.user)
        data = DestinationSerializer(destination).data
        data['liked'] = engagement.has_liked(request.user, destination)
        return Response(data)

    def put(self, request, destination_id):
        destination = destinations.update_destination(
            request.user, destinations.get_destination(destination_id), request.data
        )
        return Response(DestinationSerializer(destination).data)

    def delete(self, request, destination_id):
        destinations.delete_destination(request.user, destinations.get_destination(destination_id))
        return Response({'message': 'Destination deleted successfully'})


@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def approve_destination(request, destination_id):
    destination = destinations.review_destination(
        request.user,
        destinations.get_destination(destination_id),
        request.data.get('action'),
        request.data.get('rejection_reason'),
    )
    return Response(DestinationSerializer(destination).data)


# ----------------------------------------------------------------------
# Engagement
# ----------------------------------------------------------------------
class CommentListView(APIView):
    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request, destination_id):
        destination = destinations.get_visible_destination(destination_id, request.user)
        qs = destination.comments.select_related('user')
        return paginated_response(self, qs, CommentSerializer, 'comments')

    def post(self, request, destination_id):
        destination = destinations.get_visible_destination(destination_id, request.user)
        comment = engagement.add_comment(
            request.user, destination, request.data.get('content'), request.data.get('rating')
        )
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class LikeView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, destination_id):
        destination = destinations.get_visible_destination(destination_id, request.user)
        return Response(engagement.toggle_like(request.user, destination))

    def delete(self, request, destination_id):
        destination = destinations.get_visible_destination(destination_id, request.user)
        return Response(engagement.unlike(request.user, destination))


class LikeListView(APIView):
    def get(self, request, destination_id):
        destination = destinations.get_visible_destination(destination_id, request.user)
        qs = destination.likes.select_related('user')
        return paginated_response(self, qs, LikeSerializer, 'likes', page_size=20)


class ViewListView(APIView):
    def get(self, request, destination_id):
        destination = destinations.get_visible_destination(destination_id, request.user)
        qs = destination.views.select_related('user')
        return paginated_response(self, qs, ViewSerializer, 'views', page_size=20)


@api_view(['POST'])
def track_view(request, destination_id):
    destination = destinations.get_visible_destination(destination_id, request.user)
    return Response(engagement.record_view(request, destination))


# ----------------------------------------------------------------------
# Supporting endpoints
# ----------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([IsProviderOrAdmin])
@parser_classes([MultiPartParser, FormParser])
def upload_image(request):
    url = save_image(request.FILES.get('image'), request=request)
    return Response({'image_url': url}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsProviderOrAdmin])
def geocode_view(request):
    result = geocode(request.query_params.get('q'))
    if result is None:
        raise NotFound("No results found")
    return Response(result)


class AssignmentView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, provider_id):
        provider = assignments.get_service_provider(provider_id)
        qs = provider.assigned_categories.select_related('category', 'subcategory')
        return Response({'assignments': AssignmentSerializer(qs, many=True).data})

    def post(self, request, provider_id):
        provider = assignments.get_service_provider(provider_id)
        assignment = assignments.assign_category(
            provider, request.data.get('category'), request.data.get('subcategory')
        )
        return Response(AssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)

    def delete(self, request, provider_id):
        provider = assignments.get_service_provider(provider_id)
        assignment_id = request.data.get('assignment_id') or request.query_params.get('assignment_id')
        assignments.remove_assignment(provider, assignment_id)
        return Response({'message': 'Category assignment removed successfully'})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_stats(request):
    stats = dashboards.admin_stats()
    stats['pending'] = DestinationSerializer(dashboards.pending_destinations(), many=True).data
    return Response(stats)
