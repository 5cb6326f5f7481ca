"""
API error formatting.

Every error leaves the API as ``{"error": "<message>"}`` with the status code
chosen by the raising code: 400 validation, 401 unauthenticated, 403
forbidden, 404 missing, 500 anything unexpected.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def error_message(detail):
    """Collapse DRF's nested error detail into one readable line."""
    if isinstance(detail, dict):
        parts = []
        for field, value in detail.items():
            message = error_message(value)
            if field in ('non_field_errors', 'detail', 'error'):
                parts.append(message)
            else:
                parts.append(f"{field}: {message}")
        return '; '.join(parts)
    if isinstance(detail, (list, tuple)):
        return ' '.join(error_message(item) for item in detail)
    return str(detail)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else 'API')
        return Response(
            {'error': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response.data = {'error': error_message(response.data)}
    return response
