from unittest.mock import patch

from django.db import OperationalError
from django.test import TestCase

from core.models import SystemConfig
from core.system_config import ensure_system_config


class HealthViewsTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        ensure_system_config()

    def test_healthz_returns_ok(self) -> None:
        resp = self.client.get("/healthz")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "application/json")
        self.assertEqual(resp.json(), {"status": "ok"})

    def test_readyz_returns_ok(self) -> None:
        resp = self.client.get("/readyz")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ready", "database": "ok"})

    def test_readyz_returns_503_when_db_unavailable(self) -> None:
        with (
            patch("django.db.connection.ensure_connection", side_effect=OperationalError("db down")),
            self.assertLogs("core.views_health", level="ERROR"),
        ):
            resp = self.client.get("/readyz")

        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json(), {"status": "not ready", "error": "db down"})

    def test_readyz_returns_503_until_config_is_seeded(self) -> None:
        SystemConfig.objects.all().delete()

        with self.assertLogs("core.views_health", level="WARNING"):
            resp = self.client.get("/readyz")

        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["error"], "system configuration missing")
