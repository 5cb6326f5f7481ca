"""
Address lookup against a Nominatim-compatible search endpoint.
"""
import logging

import requests
from django.conf import settings
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)


@retry(
    retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, max=4),
    reraise=True,
)
def _search(query):
    response = requests.get(
        settings.GEOCODER_URL,
        params={'q': query, 'format': 'json', 'limit': 1},
        headers={'User-Agent': settings.GEOCODER_USER_AGENT},
        timeout=10,
    )
    response.raise_for_status()
    return response.json()


def geocode(query):
    """
    Resolve a free-text place into coordinates.

    Returns ``{'lat', 'lon', 'display_name'}`` or ``None`` when nothing was
    found or the geocoder stayed unreachable.
    """
    query = (query or '').strip()
    if not query:
        return None
    try:
        results = _search(query)
    except requests.RequestException as e:
        logger.error("Geocoding failed for %r: %s", query, e)
        return None

    if not results:
        return None
    first = results[0]
    return {
        'lat': float(first['lat']),
        'lon': float(first['lon']),
        'display_name': first.get('display_name', query),
    }
