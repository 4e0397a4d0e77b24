import logging
import secrets
from typing import override

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from core.models import User
from core.system_config import ensure_system_config

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = (
        "Seed the system configuration and, when no users exist yet, create the "
        "first election administrator."
    )

    @override
    def add_arguments(self, parser) -> None:
        parser.add_argument("--username", default="admin", help="Username for the first administrator.")
        parser.add_argument(
            "--password",
            default="",
            help="Password for the first administrator. A random one is generated and printed when omitted.",
        )
        parser.add_argument("--display-name", default="Election administrator")

    @override
    def handle(self, *args, **options) -> None:
        username: str = str(options.get("username") or "").strip()
        password: str = str(options.get("password") or "")
        display_name: str = str(options.get("display_name") or "").strip()
        if not username:
            raise CommandError("--username must not be empty")

        config = ensure_system_config()
        self.stdout.write(f"System configuration: {config.election_title!r}")

        with transaction.atomic():
            if User.objects.exists():
                self.stdout.write("Users already exist; no administrator created.")
                return

            generated = not password
            if generated:
                password = secrets.token_urlsafe(12)

            User.objects.create_superuser(
                username=username,
                email="",
                password=password,
                role=User.Role.admin,
                display_name=display_name,
            )

        logger.info("Seeded first administrator %r", username)
        self.stdout.write(self.style.SUCCESS(f"Created administrator {username!r}."))
        if generated:
            self.stdout.write(f"Generated password: {password}")
