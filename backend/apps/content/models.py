from django.conf import settings
from django.db import models
from django.utils import timezone


class ContentPage(models.TextChoices):
    ABOUT = "about", "About Page"
    COOKIE_POLICY = "cookie-policy", "Cookie Policy"
    PRIVACY_POLICY = "privacy-policy", "Privacy Policy"
    TERMS_OF_SERVICE = "terms-of-service", "Terms of Service"
    RETURNS = "returns", "Returns & Exchanges"
    SHIPPING = "shipping", "Shipping Information"


class PageContent(models.Model):
    # JSON text for the About page, sanitised HTML for the policy pages
    page = models.CharField(max_length=40, primary_key=True, choices=ContentPage.choices)
    title = models.CharField(max_length=200)
    content = models.TextField(blank=True, default="")
    document_url = models.URLField(max_length=500, blank=True, default="")
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "content_pages"
        ordering = ["page"]

    def __str__(self):
        return self.title
