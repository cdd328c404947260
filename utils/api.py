"""
JSON helpers shared by every ``/api/...`` view.

All endpoints answer with the same envelope: ``{"success": true, ...}`` on
success and ``{"success": false, "message": "..."}`` with an HTTP error status
otherwise.
"""

import json
import logging
from functools import wraps

from django.http import JsonResponse

from .exceptions import PortalError, ValidationFailed
from .security import sanitize_exception_message

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def success_response(http_status=200, **data):
    return JsonResponse({"success": True, **data}, status=http_status)


def error_response(message, status=400, **extra):
    return JsonResponse({"success": False, "message": message, **extra}, status=status)


def json_body(request):
    """Decode the request body as a JSON object.

    Multipart requests are accepted too: the ``data`` form field (when present)
    is parsed as JSON and the remaining form fields are merged in.
    """
    content_type = request.content_type or ""
    if content_type.startswith("multipart/") or content_type.startswith(
        "application/x-www-form-urlencoded"
    ):
        payload = {}
        raw = request.POST.get("data")
        if raw:
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise ValidationFailed("รูปแบบข้อมูล JSON ไม่ถูกต้อง") from exc
        for key in request.POST:
            if key != "data":
                payload.setdefault(key, request.POST.get(key))
        return payload

    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationFailed("รูปแบบข้อมูล JSON ไม่ถูกต้อง") from exc
    if not isinstance(payload, dict):
        raise ValidationFailed("รูปแบบข้อมูล JSON ไม่ถูกต้อง")
    return payload


def get_pagination(request):
    """Return ``(page, limit)`` from the query string, clamped to sane bounds."""
    try:
        page = max(int(request.GET.get("page", 1)), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(request.GET.get("limit", DEFAULT_PAGE_SIZE))
    except (TypeError, ValueError):
        limit = DEFAULT_PAGE_SIZE
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    return page, limit


def paginate(queryset, page, limit):
    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset : offset + limit])
    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": (total + limit - 1) // limit if total else 0,
    }
    return items, pagination


def api_view(view_func):
    """Translate ``PortalError`` into the JSON envelope and log everything else."""

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except PortalError as exc:
            # extra may carry its own "status" key (application status codes)
            payload = {"success": False, "message": exc.message, **exc.extra}
            return JsonResponse(payload, status=exc.status_code)
        except Exception as exc:
            logger.exception("Unhandled error in %s", view_func.__name__)
            return error_response(sanitize_exception_message(exc), status=500)

    return wrapper
