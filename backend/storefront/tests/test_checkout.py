import unittest

from storefront.api_client import ApiError
from storefront.auth import AuthStore
from storefront.cart_store import CartStore
from storefront.checkout import (
    CUSTOMER_INFO_KEY,
    CheckoutFlow,
    ConfirmationOutcome,
    email_sent_key,
)
from storefront.storage import MemoryStorage
from storefront.tests.fakes import FakeCartApi, ManualScheduler, signed_in_session
from storefront.toasts import ToastChannel

UK_RATES = {
    "country": "GB",
    "rates": [
        {"id": "standard-uk", "name": "Standard Shipping", "price": 5.0, "estimatedDays": "2-3 business days"},
        {"id": "express-uk", "name": "Express Shipping", "price": 10.0, "estimatedDays": "1 business day"},
    ],
}
US_RATES = {
    "country": "US",
    "rates": [{"id": "standard-international", "name": "International Standard", "price": 20.0, "estimatedDays": "7-14"}],
}


class FakeCheckoutApi:
    def __init__(self):
        self.intents = []
        self.emails = []
        self.fail_email = False
        self.fail_intent = False

    def shipping_rates(self, country):
        return UK_RATES if country in ("GB", "UK") else US_RATES

    def currency_rates(self):
        return {
            "base": "GBP",
            "currencies": [
                {"code": "GBP", "symbol": "£", "decimals": 2, "rate": 1},
                {"code": "USD", "symbol": "$", "decimals": 2, "rate": 0.8},
                {"code": "JPY", "symbol": "¥", "decimals": 0, "rate": 0.005},
                {"code": "EUR", "symbol": "€", "decimals": 2, "rate": None},
            ],
        }

    def create_payment_intent(self, payload):
        if self.fail_intent:
            raise ApiError("Stripe is not configured", status=500, code="CONFIGURATION_ERROR")
        self.intents.append(payload)
        n = len(self.intents)
        return {"clientSecret": f"pi_{n}_secret", "paymentIntentId": f"pi_{n}"}

    def send_order_email(self, payment_intent_id, customer_email, customer_name=None):
        if self.fail_email:
            raise ApiError("SMTP down", status=502, code="EMAIL_ERROR")
        self.emails.append((payment_intent_id, customer_email, customer_name))
        return {"success": True}


class FakeConfirmer:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def confirm(self, client_secret, *, billing_details, shipping, return_url):
        self.calls.append({"client_secret": client_secret, "billing": billing_details, "return_url": return_url})
        return self.outcome


class CheckoutFlowTests(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryStorage()
        self.toasts = ToastChannel()
        self.session = signed_in_session()
        self.cart = CartStore(self.storage, self.session, FakeCartApi(), self.toasts)
        self.cart.add_item({"id": "tea", "productId": "tea", "name": "Rose Tea", "price": 30, "image": "", "category": "Tea", "description": ""})
        self.cart.add_item({"id": "tea", "productId": "tea", "name": "Rose Tea", "price": 30, "image": "", "category": "Tea", "description": ""})
        self.api = FakeCheckoutApi()
        self.scheduler = ManualScheduler()

    def flow(self, outcome=None, session=None):
        confirmer = FakeConfirmer(outcome or ConfirmationOutcome("succeeded", "pi_1"))
        self.confirmer = confirmer
        flow = CheckoutFlow(
            self.cart,
            session or self.session,
            self.api,
            self.toasts,
            self.storage,
            confirmer,
            scheduler=self.scheduler,
            cleanup_delay=2,
        )
        flow.update_customer(name="Ada", email="ada@example.com", line1="1 Bond St", city="London", postal_code="W1")
        flow.load_shipping_rates()
        return flow

    def test_preconditions(self):
        guest = CheckoutFlow(self.cart, AuthStore(MemoryStorage()), self.api, self.toasts, self.storage)
        self.assertEqual(guest.check_preconditions(), "/login?redirect=/checkout")
        self.cart.items = []
        self.assertEqual(guest.check_preconditions(), "/cart")

    def test_first_rate_auto_selected_and_country_change_reloads(self):
        flow = self.flow()
        self.assertEqual(flow.state.shipping_rate["id"], "standard-uk")
        self.assertEqual(flow.total, 65)
        flow.update_customer(country="US")
        self.assertEqual(flow.state.shipping_rate["id"], "standard-international")
        self.assertEqual(flow.shipping_cost, 20)

    def test_currency_conversion(self):
        flow = self.flow()
        flow.load_currency_rates()
        flow.set_currency("usd")
        self.assertEqual(flow.subtotal, 75.0)
        self.assertEqual(flow.shipping_cost, 6.25)
        flow.set_currency("JPY")
        self.assertEqual(flow.subtotal, 12000)
        flow.set_currency("EUR")
        self.assertEqual(flow.subtotal, 60)

    def test_intent_payload(self):
        flow = self.flow()
        self.assertTrue(flow.ensure_payment_intent())
        payload = self.api.intents[0]
        self.assertEqual(payload["amount"], 65)
        self.assertEqual(payload["currency"], "GBP")
        self.assertEqual(payload["shippingMethod"], "standard-uk")
        self.assertEqual(payload["shippingAddress"]["postalCode"], "W1")
        self.assertEqual(payload["items"], [{"id": "tea", "name": "Rose Tea", "quantity": 2, "price": 30}])
        self.assertEqual(payload["metadata"]["userId"], "7")
        self.assertEqual(payload["metadata"]["customerEmail"], "ada@example.com")

    def test_intent_not_recreated_for_name_or_email_change(self):
        flow = self.flow()
        flow.ensure_payment_intent()
        flow.update_customer(name="Ada L.", email="ada@lovelace.dev")
        flow.ensure_payment_intent()
        self.assertEqual(len(self.api.intents), 1)
        flow.update_customer(postal_code="W2")
        flow.ensure_payment_intent()
        flow.select_shipping("express-uk")
        flow.ensure_payment_intent()
        self.assertEqual(len(self.api.intents), 3)

    def test_intent_failure_is_toasted(self):
        self.api.fail_intent = True
        flow = self.flow()
        self.assertFalse(flow.ensure_payment_intent())
        self.assertEqual(self.toasts.last.title, "Payment Setup Failed")
        self.assertEqual(self.toasts.last.message, "Stripe is not configured")

    def test_successful_payment_sends_email_and_clears_cart(self):
        flow = self.flow()
        result = flow.submit()
        self.assertEqual(result.status, "succeeded")
        self.assertEqual(self.api.emails, [("pi_1", "ada@example.com", "Ada")])
        self.assertEqual(self.cart.items, [])
        self.assertTrue(self.storage.get_item(email_sent_key("pi_1")))
        self.assertEqual(self.confirmer.calls[0]["return_url"], "/payment-success")

    def test_declined_payment_keeps_cart(self):
        flow = self.flow(ConfirmationOutcome("failed", "pi_1", error="Your card was declined."))
        result = flow.submit()
        self.assertEqual(result.status, "failed")
        self.assertEqual(result.message, "Your card was declined.")
        self.assertEqual(self.cart.get_total_items(), 2)
        self.assertEqual(self.api.emails, [])
        self.assertEqual(self.toasts.last.title, "Payment Failed")

    def test_email_failure_does_not_fail_payment(self):
        self.api.fail_email = True
        flow = self.flow()
        result = flow.submit()
        self.assertEqual(result.status, "succeeded")
        self.assertEqual(self.cart.items, [])
        self.assertIsNone(self.storage.get_item(email_sent_key("pi_1")))

    def test_redirect_stores_contact_then_return_page_completes(self):
        flow = self.flow(ConfirmationOutcome("requires_action", "pi_1", redirect_url="https://bank.example/3ds"))
        result = flow.submit()
        self.assertEqual(result.status, "redirect")
        self.assertEqual(result.redirect, "https://bank.example/3ds")
        self.assertEqual(self.storage.get_item(CUSTOMER_INFO_KEY), {"name": "Ada", "email": "ada@example.com"})
        self.assertEqual(self.cart.get_total_items(), 2)

        returned = CheckoutFlow(
            self.cart, self.session, self.api, self.toasts, self.storage, scheduler=self.scheduler, cleanup_delay=2
        )
        outcome = returned.complete_return("pi_1", "succeeded")
        self.assertEqual(outcome.status, "succeeded")
        self.assertEqual(self.api.emails, [("pi_1", "ada@example.com", "Ada")])
        self.assertEqual(self.cart.items, [])
        self.assertEqual(self.toasts.last.title, "Payment Successful")
        self.assertEqual(self.scheduler.jobs[0][0], 2)
        self.assertIsNotNone(self.storage.get_item(CUSTOMER_INFO_KEY))
        self.scheduler.run_all()
        self.assertIsNone(self.storage.get_item(CUSTOMER_INFO_KEY))

    def test_return_page_dedupes_email_across_reloads(self):
        self.storage.set_item(CUSTOMER_INFO_KEY, {"name": "Ada", "email": "ada@example.com"})
        first = CheckoutFlow(self.cart, self.session, self.api, self.toasts, self.storage, scheduler=self.scheduler)
        first.complete_return("pi_9", "succeeded")
        first.complete_return("pi_9", "succeeded")
        reloaded = CheckoutFlow(self.cart, self.session, self.api, self.toasts, self.storage, scheduler=self.scheduler)
        reloaded.complete_return("pi_9", "succeeded")
        self.assertEqual(len(self.api.emails), 1)

    def test_return_page_falls_back_to_account_email(self):
        flow = CheckoutFlow(self.cart, self.session, self.api, self.toasts, self.storage, scheduler=self.scheduler)
        flow.complete_return("pi_5", "succeeded")
        self.assertEqual(self.api.emails, [("pi_5", "ada@example.com", "Ada Lovelace")])

    def test_failed_redirect_status_keeps_cart(self):
        flow = CheckoutFlow(self.cart, self.session, self.api, self.toasts, self.storage, scheduler=self.scheduler)
        result = flow.complete_return("pi_1", "failed")
        self.assertEqual(result.status, "failed")
        self.assertEqual(self.cart.get_total_items(), 2)
        self.assertEqual(self.api.emails, [])
