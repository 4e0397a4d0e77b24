import logging

from django.test import SimpleTestCase

from config.logging_filters import QuietPollingFilter


def _record(msg: str, name: str = "django.server") -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


class QuietPollingFilterTests(SimpleTestCase):
    def test_drops_successful_health_checks_and_dashboard_polls(self) -> None:
        filt = QuietPollingFilter()

        self.assertFalse(filt.filter(_record('"GET /healthz HTTP/1.1" 200 12')))
        self.assertFalse(filt.filter(_record('"GET /api/public/results HTTP/1.1" 200 812')))
        self.assertFalse(filt.filter(_record('"GET /api/public/audit-feed?limit=20 HTTP/1.1" 200 4096')))

    def test_keeps_errors_exports_and_other_paths(self) -> None:
        filt = QuietPollingFilter()

        self.assertTrue(filt.filter(_record('"GET /healthz HTTP/1.1" 503 12')))
        self.assertTrue(filt.filter(_record('"GET /api/public/results.csv HTTP/1.1" 200 300')))
        self.assertTrue(filt.filter(_record('"POST /api/staff/submit HTTP/1.1" 200 90')))
        self.assertTrue(filt.filter(_record('"GET /api/units HTTP/1.1" 200 12')))

    def test_handles_gunicorn_format(self) -> None:
        filt = QuietPollingFilter()

        record = _record(
            '- - - [27/Jan/2026:10:49:08 +0000] "GET /readyz HTTP/1.1" 200 37 "-" "Go-http-client/1.1"',
            name="gunicorn.access",
        )
        self.assertFalse(filt.filter(record))

    def test_custom_paths(self) -> None:
        filt = QuietPollingFilter(paths=["/api/units"])

        self.assertFalse(filt.filter(_record('"GET /api/units HTTP/1.1" 200 12')))
        self.assertTrue(filt.filter(_record('"GET /healthz HTTP/1.1" 200 12')))
