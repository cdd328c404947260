"""
Security helpers for the member portal.

URL validation for redirects, client fingerprinting for audit logs, and
sanitized error messages for JSON responses.
"""

from django.utils.http import url_has_allowed_host_and_scheme


def is_safe_redirect_url(url: str | None, request=None) -> bool:
    """
    Check if a URL is safe to redirect to.

    Relative paths are always accepted; absolute URLs must point at the host
    serving the request.
    """
    if not url:
        return False

    allowed_hosts = None
    if request is not None and hasattr(request, "get_host"):
        try:
            allowed_hosts = {request.get_host()}
        except Exception:
            # DisallowedHost or an incomplete request object
            allowed_hosts = None

    return url_has_allowed_host_and_scheme(url, allowed_hosts=allowed_hosts)


def get_safe_redirect_url(url: str | None, default: str = "/dashboard", request=None) -> str:
    if is_safe_redirect_url(url, request):
        return url  # type: ignore[return-value]
    return default


def get_client_ip(request) -> str | None:
    """Best-effort client IP, honouring the first X-Forwarded-For hop."""
    if request is None:
        return None
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    real_ip = request.META.get("HTTP_X_REAL_IP")
    if real_ip:
        return real_ip.strip()
    return request.META.get("REMOTE_ADDR") or None


def get_user_agent(request) -> str:
    if request is None:
        return ""
    return request.META.get("HTTP_USER_AGENT", "")[:500]


def sanitize_exception_message(exception: Exception) -> str:
    """
    Map an exception to a generic Thai message safe for API responses.

    The real exception is logged by the caller; nothing about paths, SQL or
    stack frames reaches the client.
    """
    safe_exceptions = {
        "ValidationError": "ข้อมูลไม่ถูกต้อง กรุณาตรวจสอบอีกครั้ง",
        "PermissionDenied": "ไม่มีสิทธิ์ดำเนินการนี้",
        "ObjectDoesNotExist": "ไม่พบข้อมูลที่ต้องการ",
        "DoesNotExist": "ไม่พบข้อมูลที่ต้องการ",
        "IntegrityError": "ข้อมูลขัดแย้งกับข้อมูลที่มีอยู่ในระบบ",
    }

    exception_type = type(exception).__name__
    if exception_type in safe_exceptions:
        return safe_exceptions[exception_type]
    return "เกิดข้อผิดพลาดในระบบ กรุณาลองใหม่อีกครั้ง"
