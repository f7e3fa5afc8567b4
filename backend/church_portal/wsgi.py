"""WSGI config for the Church Portal discipleship backend."""
import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'church_portal.settings')
application = get_wsgi_application()
