from datetime import timedelta

from django.db.models import Count, Q
from django.utils.timezone import now

from notifications.models import Notification
from utils.management.commands.base_cronjob import BaseCronJobCommand


class Command(BaseCronJobCommand):
    help = "Purge notifications older than N days (default 90)"
    job_name = "cleanup_old_notifications"
    max_execution_time = timedelta(minutes=30)

    def add_arguments(self, parser):
        super().add_arguments(parser)
        parser.add_argument(
            "--days",
            type=int,
            default=90,
            help="Number of days after which notifications are purged (default: 90)",
        )

    def execute_job(self, *args, **options):
        purge_days = options.get("days", 90)
        cutoff_date = now() - timedelta(days=purge_days)
        old_notifications = Notification.objects.filter(created_at__lt=cutoff_date)

        stats = old_notifications.aggregate(
            total=Count("id"), unread=Count("id", filter=Q(read=False))
        )
        if not stats["total"]:
            self.log_info("No old notifications found to purge")
            return 0

        self.log_info(
            f"Found {stats['total']} notification(s) older than {purge_days} days "
            f"({stats['unread']} unread)"
        )
        if self.dry_run:
            self.log_info(f"Would purge {stats['total']} notification(s)")
            return stats["total"]

        deleted_count, _ = old_notifications.delete()
        self.log_info(f"Purged {deleted_count} notification(s)")
        return deleted_count
