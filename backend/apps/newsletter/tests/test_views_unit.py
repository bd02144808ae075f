import unittest
from unittest.mock import Mock, patch

from rest_framework.test import APIRequestFactory

from apps.newsletter.services import SubscriptionDTO
from apps.newsletter.views import NewsletterSubscribeView


class NewsletterViewUnitTests(unittest.TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()

    def post(self, body):
        request = self.factory.post("/api/newsletter/", body, format="json")
        return NewsletterSubscribeView.as_view()(request)

    def test_success_envelope(self):
        service = Mock()
        service.subscribe.return_value = (
            SubscriptionDTO(id=5, email="ada@example.com", registered_at=None, needs_confirmation=True),
            None,
        )
        with patch.object(NewsletterSubscribeView, "service", service):
            response = self.post({"email": "ada@example.com", "locale": "de"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["data"]["needsConfirmation"], True)
        service.subscribe.assert_called_once_with("ada@example.com", "de")

    def test_missing_email_is_validation_error(self):
        response = self.post({})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")

    def test_upstream_failure_maps_to_503(self):
        service = Mock()
        service.subscribe.return_value = (None, ("SERVICE_UNAVAILABLE", "Systeme.io is down", None))
        with patch.object(NewsletterSubscribeView, "service", service):
            response = self.post({"email": "ada@example.com"})
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data["error"]["message"], "Systeme.io is down")
