from django.conf import settings
from django.db import models
from django.utils import timezone


class ActivityType(models.TextChoices):
    USER_REGISTERED = "user.registered"
    USER_LOGIN = "user.login"
    USER_LOGIN_FAILED = "user.login_failed"
    USER_LOGOUT = "user.logout"
    USER_PASSWORD_RESET_REQUESTED = "user.password_reset_requested"
    USER_PASSWORD_RESET = "user.password_reset"
    ORDER_CREATED = "order.created"
    ORDER_UPDATED = "order.updated"
    ORDER_CANCELLED = "order.cancelled"
    ORDER_PAYMENT_RECEIVED = "order.payment_received"
    CART_ITEM_ADDED = "cart.item_added"
    CART_ITEM_UPDATED = "cart.item_updated"
    CART_ITEM_REMOVED = "cart.item_removed"
    CART_CLEARED = "cart.cleared"
    PRODUCT_CREATED = "product.created"
    PRODUCT_UPDATED = "product.updated"
    PRODUCT_DELETED = "product.deleted"
    CONTENT_UPDATED = "content.updated"
    CATEGORY_CREATED = "category.created"
    CATEGORY_UPDATED = "category.updated"
    CATEGORY_DELETED = "category.deleted"


class Activity(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activities",
    )
    type = models.CharField(max_length=64, choices=ActivityType.choices)
    description = models.CharField(max_length=255, blank=True, default="")
    metadata = models.JSONField(default=dict, blank=True)
    session_id = models.CharField(max_length=128, blank=True, default="")
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "activities"
        ordering = ("-created_at", "-id")
        indexes = [
            models.Index(fields=["type", "created_at"], name="activity_type_created_idx"),
            models.Index(fields=["user", "created_at"], name="activity_user_created_idx"),
        ]

    def __str__(self):
        return f"{self.type} by {self.user_id or 'anonymous'}"
