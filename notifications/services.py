import logging

from django.db import DatabaseError, transaction

from .models import Notification

logger = logging.getLogger(__name__)

CONTEXT_FIELDS = (
    "member_code",
    "company_name",
    "member_type",
    "member_group_code",
    "type_code",
    "addr_code",
    "addr_lang",
)


def create_notification(user, notification_type, message, link="", **context):
    """
    Create a notification unless the user already has the same undismissed one.

    ``context`` carries the optional address-update fields (``member_code``,
    ``addr_code`` and so on). Failures are logged and yield ``None`` so the
    calling workflow can carry on.
    """
    if user is None:
        return None

    unknown = set(context) - set(CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"Unexpected notification fields: {', '.join(sorted(unknown))}")

    try:
        with transaction.atomic():
            existing = Notification.objects.filter(
                user=user, type=notification_type, message=message, dismissed=False
            ).first()
            if existing:
                return existing
            return Notification.objects.create(
                user=user,
                type=notification_type,
                message=message,
                link=link or "",
                **{key: value or "" for key, value in context.items()},
            )
    except DatabaseError:
        logger.exception(
            "Failed to create %s notification for user %s", notification_type, user.pk
        )
        return None
