import importlib
from unittest.mock import patch

from django.db import OperationalError
from django.test import TestCase

import core.startup
from core.models import SystemConfig


class StartupSeedRetryTests(TestCase):
    def test_startup_retries_on_transient_database_failure(self) -> None:
        startup_module = importlib.reload(core.startup)

        with (
            patch(
                "core.startup.ensure_system_config",
                side_effect=[
                    OperationalError("temporary-1"),
                    OperationalError("temporary-2"),
                    SystemConfig(pk=1),
                ],
            ) as ensure_mock,
            patch("core.startup.time", create=True) as time_mock,
        ):
            self.assertTrue(startup_module.ensure_startup_state())

        self.assertEqual(ensure_mock.call_count, 3)
        self.assertEqual([c.args[0] for c in time_mock.sleep.call_args_list], [2.0, 4.0])
        self.assertTrue(startup_module._startup_state_ready)

    def test_startup_logs_error_after_all_retries_exhausted(self) -> None:
        startup_module = importlib.reload(core.startup)

        with (
            patch("core.startup.ensure_system_config", side_effect=OperationalError("still-down")) as ensure_mock,
            patch("core.startup.time", create=True) as time_mock,
            self.assertLogs("core.startup", level="ERROR") as log_context,
        ):
            self.assertFalse(startup_module.ensure_startup_state())

        self.assertEqual(ensure_mock.call_count, 3)
        self.assertEqual(time_mock.sleep.call_count, 2)
        self.assertFalse(startup_module._startup_state_ready)
        self.assertTrue(any("database unavailable after" in message for message in log_context.output))

    def test_startup_skips_unmigrated_schema(self) -> None:
        startup_module = importlib.reload(core.startup)

        with (
            patch("core.startup.connection.introspection.table_names", return_value=[]),
            patch("core.startup.ensure_system_config") as ensure_mock,
        ):
            self.assertFalse(startup_module.ensure_startup_state())

        ensure_mock.assert_not_called()

    def test_startup_seeds_once_per_process(self) -> None:
        startup_module = importlib.reload(core.startup)
        SystemConfig.objects.all().delete()

        self.assertTrue(startup_module.ensure_startup_state())
        self.assertTrue(SystemConfig.objects.filter(pk=1).exists())

        with patch("core.startup.ensure_system_config") as ensure_mock:
            self.assertTrue(startup_module.ensure_startup_state())
        ensure_mock.assert_not_called()
