import smtplib
import unittest

from apps.contact.services import ContactMessageCommand, ContactService


class FakeMailer:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send(self, *, subject, text, html, to, reply_to=None):
        if self.error:
            raise self.error
        self.sent.append({"subject": subject, "text": text, "html": html, "to": to, "reply_to": reply_to})
        return 1


def message(**overrides):
    data = {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 7946 0000",
        "message": "Do you ship <hampers> to Jersey?",
    }
    data.update(overrides)
    return ContactMessageCommand(**data)


class ContactServiceTests(unittest.TestCase):
    def test_message_forwarded_to_shop_inbox(self):
        mailer = FakeMailer()
        ok, error = ContactService(mailer, "info@tasselandwicker.com").send_message(message())
        self.assertTrue(ok)
        self.assertIsNone(error)
        sent = mailer.sent[0]
        self.assertEqual(sent["to"], ["info@tasselandwicker.com"])
        self.assertEqual(sent["reply_to"], ["ada@example.com"])
        self.assertEqual(sent["subject"], "New Contact Form Submission from Ada Lovelace")
        self.assertIn("Do you ship <hampers> to Jersey?", sent["text"])
        self.assertIn("&lt;hampers&gt;", sent["html"])
        self.assertIn("+44 20 7946 0000", sent["html"])

    def test_missing_recipient_is_configuration_error(self):
        mailer = FakeMailer()
        ok, error = ContactService(mailer, "").send_message(message())
        self.assertFalse(ok)
        self.assertEqual(error[0], "CONFIGURATION_ERROR")
        self.assertEqual(mailer.sent, [])

    def test_delivery_failure_is_email_error(self):
        mailer = FakeMailer(error=smtplib.SMTPException("mailbox unavailable"))
        ok, error = ContactService(mailer, "info@tasselandwicker.com").send_message(message())
        self.assertFalse(ok)
        self.assertEqual(error[0], "EMAIL_ERROR")
