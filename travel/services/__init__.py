"""
Services package
Business logic shared by the API views, page views and management commands
"""
from .contact import whatsapp_url
from .geocoding import geocode
from .storage import save_image

__all__ = [
    'whatsapp_url',
    'geocode',
    'save_image',
]
