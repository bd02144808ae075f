import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Activity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("user.registered", "User Registered"),
                            ("user.login", "User Login"),
                            ("user.login_failed", "User Login Failed"),
                            ("user.logout", "User Logout"),
                            ("user.password_reset_requested", "User Password Reset Requested"),
                            ("user.password_reset", "User Password Reset"),
                            ("order.created", "Order Created"),
                            ("order.updated", "Order Updated"),
                            ("order.cancelled", "Order Cancelled"),
                            ("order.payment_received", "Order Payment Received"),
                            ("cart.item_added", "Cart Item Added"),
                            ("cart.item_updated", "Cart Item Updated"),
                            ("cart.item_removed", "Cart Item Removed"),
                            ("cart.cleared", "Cart Cleared"),
                            ("product.created", "Product Created"),
                            ("product.updated", "Product Updated"),
                            ("product.deleted", "Product Deleted"),
                            ("content.updated", "Content Updated"),
                            ("category.created", "Category Created"),
                            ("category.updated", "Category Updated"),
                            ("category.deleted", "Category Deleted"),
                        ],
                        max_length=64,
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("session_id", models.CharField(blank=True, default="", max_length=128)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "activities",
                "ordering": ("-created_at", "-id"),
                "indexes": [
                    models.Index(fields=["type", "created_at"], name="activity_type_created_idx"),
                    models.Index(fields=["user", "created_at"], name="activity_user_created_idx"),
                ],
            },
        ),
    ]
