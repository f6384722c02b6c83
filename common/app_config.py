import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class CommonConfig(AppConfig):
    """
    Extends the default Django AppConfig with the behaviour shared by every app
    in the project.

    All apps store big integer primary keys and need the SPL XML namespace
    prefixes registered before any XML is written out for debugging.
    """

    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        from common.xml import namespaces

        namespaces.register()
        logger.debug("%s ready", self.name)
