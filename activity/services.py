"""
Writers for the admin and user activity logs.

Logging an action must never break the action itself, so both helpers
catch database errors, report them through the module logger and return
``None``.
"""

import json
import logging

from django.db import DatabaseError, transaction

from utils.security import get_client_ip, get_user_agent

from .models import AdminActionLog, UserLog

logger = logging.getLogger(__name__)


def _as_text(description):
    if description is None:
        return ""
    if isinstance(description, (dict, list)):
        return json.dumps(description, ensure_ascii=False, default=str)
    return str(description)


def log_admin_action(request, admin, action_type, target_id, description=None):
    try:
        with transaction.atomic():
            return AdminActionLog.objects.create(
                admin=admin,
                action_type=action_type,
                target_id=str(target_id or ""),
                description=_as_text(description),
                ip_address=get_client_ip(request),
                user_agent=get_user_agent(request),
            )
    except DatabaseError:
        logger.exception("Failed to record admin action %s on %s", action_type, target_id)
        return None


def log_user_action(request, user, action, details=None):
    if user is None or not getattr(user, "pk", None):
        return None
    try:
        with transaction.atomic():
            return UserLog.objects.create(
                user=user,
                action=action,
                details=_as_text(details),
                ip_address=get_client_ip(request),
                user_agent=get_user_agent(request),
            )
    except DatabaseError:
        logger.exception("Failed to record user action %s for user %s", action, user.pk)
        return None


def summarize_description(description):
    """Turn a stored description into one readable line for the dashboard."""
    if not description:
        return ""
    try:
        data = json.loads(description)
    except (TypeError, ValueError):
        return description
    if not isinstance(data, dict):
        return description

    parts = []
    for key in ("message", "reason", "companyName", "memberCode", "status", "action"):
        value = data.get(key)
        if value:
            parts.append(str(value))
    return " | ".join(parts) if parts else description
