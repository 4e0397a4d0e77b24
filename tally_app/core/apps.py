from typing import override

from django.apps import AppConfig
from django.db.models.signals import post_migrate


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Election tally"

    @override
    def ready(self) -> None:
        from core.startup import seed_after_migrate

        post_migrate.connect(seed_after_migrate, sender=self, dispatch_uid="core.seed_system_config")
