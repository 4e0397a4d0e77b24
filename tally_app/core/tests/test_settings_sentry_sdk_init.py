import os
import subprocess
import sys
import textwrap
import unittest
from pathlib import Path

_APP_DIR = Path(__file__).resolve().parents[2]


class TestSettingsSentrySdkInit(unittest.TestCase):
    def _run_settings_import(self, extra_env: dict[str, str]) -> subprocess.CompletedProcess:
        env = os.environ.copy()
        env.update(
            {
                "DEBUG": "0",
                "SECRET_KEY": "test-secret-key-not-insecure-37-chars",
                "ALLOWED_HOSTS": "example.com",
                "DATABASE_HOST": "db.example.internal",
                "DATABASE_PORT": "5432",
                "DATABASE_NAME": "tally",
                "DATABASE_USER": "tally",
                "DATABASE_PASSWORD": "supersecret",
            }
        )
        env.pop("SENTRY_DSN", None)
        env.update(extra_env)

        code = textwrap.dedent(
            """
            from unittest.mock import patch

            with patch("sentry_sdk.init") as init:
                import config.settings as settings

            print(f"init_calls={init.call_count}")
            if init.call_count:
                print(init.call_args.kwargs["dsn"])
                print(f"send_default_pii={init.call_args.kwargs.get('send_default_pii')!r}")
            print(settings.DATABASES["default"]["ENGINE"])
            print("ok")
            """
        ).strip()

        return subprocess.run(
            [sys.executable, "-c", code],
            cwd=_APP_DIR,
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )

    def test_sentry_sdk_is_initialized_when_dsn_is_set(self) -> None:
        result = self._run_settings_import({"SENTRY_DSN": "http://public@example.invalid/1"})

        self.assertEqual(
            result.returncode,
            0,
            msg=f"settings import failed:\nstdout:\n{result.stdout}\nstderr:\n{result.stderr}",
        )
        lines = [line for line in result.stdout.strip().splitlines() if line]
        self.assertIn("init_calls=1", lines)
        self.assertIn("http://public@example.invalid/1", lines)
        self.assertIn("send_default_pii=False", lines)
        self.assertIn("django.db.backends.postgresql", lines)
        self.assertEqual(lines[-1], "ok")

    def test_sentry_sdk_is_skipped_without_dsn(self) -> None:
        result = self._run_settings_import({})

        self.assertEqual(result.returncode, 0, msg=result.stderr)
        self.assertIn("init_calls=0", result.stdout)

    def test_secret_key_required_when_debug_is_off(self) -> None:
        result = self._run_settings_import({"SECRET_KEY": ""})

        self.assertNotEqual(result.returncode, 0)
        self.assertIn("SECRET_KEY must be set", result.stderr)
