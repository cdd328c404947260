"""Tests for outbound email and EMAIL_DEV_MODE rerouting."""

from unittest.mock import patch

from django.core import mail
from django.test import TestCase, override_settings

from utils.email import get_dev_mode_info, send_mail, send_portal_email


class DevModeEmailTests(TestCase):
    @override_settings(EMAIL_DEV_MODE=False, EMAIL_DEV_MODE_REDIRECT_TO="")
    def test_get_dev_mode_info_disabled(self):
        self.assertEqual(get_dev_mode_info(), (False, []))

    @override_settings(
        EMAIL_DEV_MODE=True,
        EMAIL_DEV_MODE_REDIRECT_TO="dev1@example.com, dev2@example.com",
    )
    def test_get_dev_mode_info_multiple_addresses(self):
        self.assertEqual(get_dev_mode_info(), (True, ["dev1@example.com", "dev2@example.com"]))

    @override_settings(EMAIL_DEV_MODE=False)
    def test_send_mail_normal_mode(self):
        send_mail(
            subject="ผลการพิจารณา",
            message="body",
            from_email="noreply@fti.example",
            recipient_list=["user1@example.com", "user2@example.com"],
        )

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "ผลการพิจารณา")
        self.assertEqual(mail.outbox[0].to, ["user1@example.com", "user2@example.com"])

    @override_settings(EMAIL_DEV_MODE=True, EMAIL_DEV_MODE_REDIRECT_TO="dev@example.com")
    def test_send_mail_dev_mode_redirects(self):
        send_mail(
            subject="ผลการพิจารณา",
            message="body",
            from_email=None,
            recipient_list=["user1@example.com"],
            cc=["cc@example.com"],
        )

        message = mail.outbox[0]
        self.assertEqual(message.to, ["dev@example.com"])
        self.assertEqual(message.cc, [])
        self.assertIn("[DEV MODE]", message.subject)
        self.assertIn("user1@example.com, CC: cc@example.com", message.subject)

    @override_settings(EMAIL_DEV_MODE=True, EMAIL_DEV_MODE_REDIRECT_TO="dev@example.com")
    def test_dev_mode_truncates_long_recipient_list(self):
        recipients = [f"user{i}@example.com" for i in range(5)]
        send_mail("หัวข้อ", "body", None, recipients)
        self.assertIn("... and 2 more", mail.outbox[0].subject)

    @override_settings(EMAIL_DEV_MODE=True, EMAIL_DEV_MODE_REDIRECT_TO="")
    def test_dev_mode_without_redirect_raises(self):
        with self.assertRaises(ValueError):
            send_mail("หัวข้อ", "body", None, ["user@example.com"])


class PortalEmailTests(TestCase):
    @override_settings(SITE_URL="https://portal.example.test/")
    def test_link_and_signature_are_appended(self):
        self.assertTrue(
            send_portal_email("member@example.com", "หัวข้อ", "ข้อความ", link="/dashboard?tab=status")
        )
        body = mail.outbox[0].body
        self.assertIn("https://portal.example.test/dashboard?tab=status", body)
        self.assertTrue(body.endswith("The Federation of Thai Industries"))

    def test_html_alternative(self):
        send_portal_email("member@example.com", "หัวข้อ", "ข้อความ", html_message="<p>ข้อความ</p>")
        self.assertEqual(mail.outbox[0].alternatives[0][1], "text/html")

    def test_missing_recipient_is_skipped(self):
        self.assertFalse(send_portal_email("", "หัวข้อ", "ข้อความ"))
        self.assertEqual(mail.outbox, [])

    @patch("utils.email.send_mail", side_effect=ConnectionRefusedError("smtp down"))
    def test_delivery_failure_returns_false(self, mock_send):
        self.assertFalse(send_portal_email("member@example.com", "หัวข้อ", "ข้อความ"))
        mock_send.assert_called_once()
