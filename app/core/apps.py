"""
Django app configuration for core.
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Configuration for the core infrastructure application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Core"

    def ready(self):
        """Register system checks."""
        from core import checks  # noqa: F401
