"""
Absolute URL helpers for links in outbound email.

Notification links stored in the database are relative (``/dashboard?...``);
email bodies need the full portal URL.
"""

from django.conf import settings

DEV_FALLBACK_URL = "http://localhost:3000"


def get_canonical_url():
    """Return the public portal URL without a trailing slash."""
    site_url = getattr(settings, "SITE_URL", "").strip()
    if site_url:
        return site_url.rstrip("/")
    return DEV_FALLBACK_URL


def build_absolute_url(path, canonical=None):
    """
    Join a relative portal path onto the canonical URL.

    >>> build_absolute_url('/dashboard?tab=status', canonical='https://portal.fti.or.th')
    'https://portal.fti.or.th/dashboard?tab=status'
    """
    if canonical is None:
        canonical = get_canonical_url()
    canonical = canonical.rstrip("/")
    path = (path or "").lstrip("/")
    return f"{canonical}/{path}"
