from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.activities.models import Activity
from apps.users.models import Role, User


class TestActivitiesApi(APITestCase):
    def setUp(self):
        self.moderator = User.objects.create_user(
            username="mod", email="mod@example.com", password="ModPass123", role=Role.MODERATOR
        )
        self.customer = User.objects.create_user(
            username="cust", email="cust@example.com", password="CustPass123"
        )
        old = timezone.now() - timedelta(days=3)
        Activity.objects.create(type="user.login", user=self.customer, created_at=old)
        Activity.objects.create(type="cart.item_added", user=self.customer, metadata={"productId": "p1"})
        Activity.objects.create(type="cart.item_added", user=self.moderator, metadata={"productId": "p2"})
        self.client.force_authenticate(self.moderator)

    def test_list_filters_and_paginates(self):
        res = self.client.get(
            reverse("api-activities-list"), {"type": "cart.item_added", "limit": 1}
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["pagination"]["total"], 2)
        self.assertEqual(res.data["pagination"]["totalPages"], 2)
        self.assertEqual(len(res.data["activities"]), 1)

    def test_list_filters_by_user(self):
        res = self.client.get(reverse("api-activities-list"), {"userId": self.customer.id})
        self.assertEqual(res.data["pagination"]["total"], 2)
        self.assertEqual(res.data["activities"][0]["user"]["email"], "cust@example.com")

    def test_stats(self):
        res = self.client.get(reverse("api-activities-stats"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        counts = {row["type"]: row["count"] for row in res.data["activityCounts"]}
        self.assertEqual(counts["cart.item_added"], 2)
        self.assertEqual(res.data["totalUniqueUsers"], 2)
        self.assertEqual(res.data["recentActivitiesCount"], 2)

    def test_customer_forbidden(self):
        self.client.force_authenticate(self.customer)
        res = self.client.get(reverse("api-activities-list"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
