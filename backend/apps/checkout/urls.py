from django.urls import path

from .views import CurrencyRatesView, OrderEmailView, PaymentIntentView, ShippingRatesView

urlpatterns = [
    path("shipping-rates/", ShippingRatesView.as_view(), name="api-checkout-shipping-rates"),
    path("currency-rates/", CurrencyRatesView.as_view(), name="api-checkout-currency-rates"),
    path("payment-intent/", PaymentIntentView.as_view(), name="api-checkout-payment-intent"),
    path("order-email/", OrderEmailView.as_view(), name="api-checkout-order-email"),
]
