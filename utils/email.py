"""
Outbound email for the member portal.

Everything goes through ``send_mail`` so that EMAIL_DEV_MODE can reroute
mail on staging: the real recipients are moved into the subject line and the
message is delivered to EMAIL_DEV_MODE_REDIRECT_TO instead.

``send_portal_email`` is the tolerant wrapper used by the workflow services.
A failed delivery is logged and reported as ``False``; it never aborts the
approval, rejection or submission that triggered it.
"""

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

from .url_helpers import build_absolute_url

logger = logging.getLogger(__name__)

# Maximum recipients to show in subject line before truncating
MAX_RECIPIENTS_IN_SUBJECT = 3

EMAIL_SIGNATURE = "\n\nสภาอุตสาหกรรมแห่งประเทศไทย\nThe Federation of Thai Industries"


def get_dev_mode_info():
    """Return ``(is_enabled, redirect_addresses)`` for EMAIL_DEV_MODE."""
    enabled = getattr(settings, "EMAIL_DEV_MODE", False)
    redirect_to = getattr(settings, "EMAIL_DEV_MODE_REDIRECT_TO", "") or ""
    redirect_list = [addr.strip() for addr in redirect_to.split(",") if addr.strip()]
    return enabled, redirect_list


def _describe_recipients(to_list, cc_list=None):
    all_recipients = list(to_list or []) + list(cc_list or [])
    if not all_recipients:
        return "no recipients"
    if len(all_recipients) > MAX_RECIPIENTS_IN_SUBJECT:
        shown = ", ".join(all_recipients[:MAX_RECIPIENTS_IN_SUBJECT])
        remaining = len(all_recipients) - MAX_RECIPIENTS_IN_SUBJECT
        return f"{shown}, ... and {remaining} more"
    described = ", ".join(to_list) if to_list else "none"
    if cc_list:
        described += f", CC: {', '.join(cc_list)}"
    return described


def send_mail(
    subject,
    message,
    from_email,
    recipient_list,
    fail_silently=False,
    html_message=None,
    cc=None,
    connection=None,
):
    """Send one email, honouring EMAIL_DEV_MODE.

    Returns the number of delivered messages (0 or 1).

    Raises:
        ValueError: dev mode is enabled without a redirect address.
    """
    dev_mode, redirect_list = get_dev_mode_info()
    if dev_mode and not redirect_list:
        raise ValueError(
            "EMAIL_DEV_MODE is enabled but EMAIL_DEV_MODE_REDIRECT_TO is not set. "
            "Set EMAIL_DEV_MODE_REDIRECT_TO or disable EMAIL_DEV_MODE."
        )

    to = list(recipient_list)
    cc = list(cc or [])
    if dev_mode:
        subject = f"[DEV MODE] {subject} (TO: {_describe_recipients(to, cc)})"
        to, cc = redirect_list, []

    email = EmailMultiAlternatives(
        subject=subject,
        body=message,
        from_email=from_email or settings.DEFAULT_FROM_EMAIL,
        to=to,
        cc=cc,
        connection=connection,
    )
    if html_message:
        email.attach_alternative(html_message, "text/html")
    return email.send(fail_silently=fail_silently)


def send_portal_email(recipient, subject, body, link=None, html_message=None):
    """Send a workflow email to one recipient; return True when delivered.

    ``link`` is a portal-relative path appended to the body as a full URL.
    """
    if not recipient:
        logger.warning("Skipping email %r: no recipient address", subject)
        return False

    if link:
        body = f"{body}\n\n{build_absolute_url(link)}"
    body = f"{body}{EMAIL_SIGNATURE}"

    try:
        sent = send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient],
            html_message=html_message,
        )
    except Exception:
        logger.exception("Failed to send email %r to %s", subject, recipient)
        return False
    return bool(sent)
