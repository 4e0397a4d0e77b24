import logging

from django.conf import settings
from django.db import transaction

from core.models import SYSTEM_CONFIG_PK, SystemConfig

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS: frozenset[str] = frozenset({"public_view_enabled", "election_title", "school_name"})


def _seed_defaults() -> dict[str, object]:
    return {
        "public_view_enabled": False,
        "election_title": str(settings.TALLY_ELECTION_TITLE),
        "school_name": str(settings.TALLY_SCHOOL_NAME),
    }


def ensure_system_config() -> SystemConfig:
    """Create the singleton config row if it is missing.

    Runs once at startup (post_migrate and the seed_election command) so that
    request-time reads never need to create it.
    """
    config, created = SystemConfig.objects.get_or_create(pk=SYSTEM_CONFIG_PK, defaults=_seed_defaults())
    if created:
        logger.info("Seeded system configuration %r", config.election_title)
    return config


def get_system_config() -> SystemConfig:
    config = SystemConfig.objects.filter(pk=SYSTEM_CONFIG_PK).first()
    if config is None:
        logger.warning("System configuration row is missing; using disabled defaults")
        return SystemConfig(pk=SYSTEM_CONFIG_PK, **_seed_defaults())
    return config


def public_view_enabled() -> bool:
    return bool(
        SystemConfig.objects.filter(pk=SYSTEM_CONFIG_PK).values_list("public_view_enabled", flat=True).first()
    )


@transaction.atomic
def update_system_config(**changes: object) -> SystemConfig:
    unknown = sorted(set(changes) - _EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown config fields: {', '.join(unknown)}")

    config, _created = SystemConfig.objects.select_for_update().get_or_create(
        pk=SYSTEM_CONFIG_PK,
        defaults=_seed_defaults(),
    )
    if not changes:
        return config

    if "public_view_enabled" in changes:
        config.public_view_enabled = bool(changes["public_view_enabled"])
    if "election_title" in changes:
        config.election_title = str(changes["election_title"] or "").strip()
    if "school_name" in changes:
        config.school_name = str(changes["school_name"] or "").strip()

    config.save(update_fields=[*sorted(changes), "updated_at"])
    logger.info("System configuration updated: %s", ", ".join(sorted(changes)))
    return config
