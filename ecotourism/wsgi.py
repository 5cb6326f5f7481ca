"""
WSGI config for the ecotourism project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'ecotourism.settings')

application = get_wsgi_application()
