from django.conf import settings
from django.db import models
from django.utils import timezone


class Cart(models.Model):
    """A shopping cart owned either by a user or by an anonymous session."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="cart",
    )
    session_id = models.CharField(max_length=128, unique=True, null=True, blank=True)
    last_synced_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "carts"

    def __str__(self):
        owner = f"user {self.user_id}" if self.user_id else f"session {self.session_id}"
        return f"Cart {self.id} for {owner}"


class CartLine(models.Model):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="lines")
    # productId, or productId-variantSlug for variant purchases
    item_id = models.CharField(max_length=255)
    product_id = models.CharField(max_length=255)
    name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    image = models.TextField(blank=True, default="")
    category = models.CharField(max_length=120, blank=True, default="")
    description = models.TextField(blank=True, default="")
    quantity = models.PositiveIntegerField(default=1)
    variant_name = models.CharField(max_length=120, blank=True, default="")
    custom_items = models.JSONField(null=True, blank=True)
    basket_items = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "cart_lines"
        ordering = ["created_at", "id"]
        unique_together = ("cart", "item_id")

    def __str__(self):
        return f"{self.item_id} x{self.quantity}"
