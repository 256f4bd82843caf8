# core/apps.py

# Import AppConfig from django.apps because it's the base class for a Django app configuration.
from django.apps import AppConfig

"""
This class tells Django that an app named "core" exists.
It holds project-wide plumbing that doesn't belong to just one
feature: the shared error taxonomy, the JSON error boundary used
by every API view, and the pagination helpers.
"""
class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
