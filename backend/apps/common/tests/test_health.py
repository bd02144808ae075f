import json
import unittest
from unittest import mock

from django.core.cache import cache
from django.test import override_settings

from apps.common import views


class HealthViewsUnitTests(unittest.TestCase):
    def test_live_health_returns_alive_payload(self):
        response = views.live_health(None)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(json.loads(response.content), {"status": "alive"})

    @mock.patch("apps.common.views._cache_check", return_value={"status": "ok", "latency_ms": 0.4})
    @mock.patch("apps.common.views._db_check", return_value={"status": "ok", "latency_ms": 1.23})
    def test_ready_health_ok_when_database_and_cache_answer(self, _db, _cache):
        with override_settings(STRIPE_SECRET_KEY="sk_test_1", SYSTEME_API_KEY="", ORDER_NOTIFICATION_EMAIL="shop@example.com"):
            response = views.ready_health(None)
        self.assertEqual(response.status_code, 200)
        payload = json.loads(response.content)
        self.assertEqual(payload["status"], "ok")
        self.assertEqual(payload["checks"]["cache"]["status"], "ok")
        self.assertEqual(
            payload["integrations"],
            {"payments": "configured", "newsletter": "missing", "orderNotifications": "configured"},
        )

    @mock.patch("apps.common.views._cache_check", return_value={"status": "ok", "latency_ms": 0.4})
    @mock.patch("apps.common.views._db_check", return_value={"status": "fail", "error": "db down"})
    def test_ready_health_degraded_when_database_fails(self, mock_db, _cache):
        response = views.ready_health(None)
        self.assertEqual(response.status_code, 503)
        payload = json.loads(response.content)
        self.assertEqual(payload["status"], "degraded")
        self.assertEqual(payload["checks"]["database"], mock_db.return_value)

    @mock.patch("apps.common.views._db_check", return_value={"status": "ok", "latency_ms": 1.0})
    def test_missing_integrations_do_not_fail_readiness(self, _db):
        with override_settings(STRIPE_SECRET_KEY="", SYSTEME_API_KEY="", ORDER_NOTIFICATION_EMAIL=""):
            response = views.ready_health(None)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(set(json.loads(response.content)["integrations"].values()), {"missing"})


class CacheCheckTests(unittest.TestCase):
    def test_round_trip_through_configured_cache(self):
        self.assertEqual(views._cache_check()["status"], "ok")
        cache.delete(views.CACHE_CHECK_KEY)

    def test_lost_value_reported_as_failure(self):
        with mock.patch("apps.common.views.cache") as fake_cache:
            fake_cache.get.return_value = None
            result = views._cache_check()
        self.assertEqual(result["status"], "fail")

    def test_backend_error_reported_as_failure(self):
        with mock.patch("apps.common.views.cache") as fake_cache:
            fake_cache.set.side_effect = ConnectionError("refused")
            result = views._cache_check()
        self.assertEqual(result, {"status": "fail", "error": "refused"})
