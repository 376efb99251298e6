"""Core application configuration."""

import logging

from django.apps import AppConfig
from django.conf import settings
from django.db.models.signals import post_migrate

logger = logging.getLogger(__name__)


def _create_admin_user(sender, **kwargs):
    """Ensure an ``admin`` superuser with an admin sales profile exists.

    Nothing is created unless ``SALESDESK_ADMIN_PASSWORD`` is set.
    """

    password = getattr(settings, "SALESDESK_ADMIN_PASSWORD", "")
    if not password:
        return

    from django.contrib.auth import get_user_model

    from crm.models import SalesProfile

    User = get_user_model()
    user = User.objects.filter(username="admin").first()
    if user is None:
        user = User.objects.create_superuser("admin", email="", password=password)
        logger.info("Created default admin user")
    SalesProfile.objects.get_or_create(
        user=user, defaults={"role": SalesProfile.ROLE_ADMIN, "full_name": "Administrator"}
    )


class CoreConfig(AppConfig):
    """Configuration for the core app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"

    def ready(self):  # pragma: no cover - executed via Django startup
        """Connect signal handlers when the app is ready."""

        post_migrate.connect(
            _create_admin_user, dispatch_uid="core.create_admin_user"
        )
