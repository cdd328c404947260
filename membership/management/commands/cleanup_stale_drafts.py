from datetime import timedelta

from django.utils.timezone import now

from membership.models import ApplicationDraft
from utils.management.commands.base_cronjob import BaseCronJobCommand


class Command(BaseCronJobCommand):
    help = "Delete membership application drafts not updated for N days (default 30)"
    job_name = "cleanup_stale_drafts"
    max_execution_time = timedelta(minutes=15)

    def add_arguments(self, parser):
        super().add_arguments(parser)
        parser.add_argument(
            "--days",
            type=int,
            default=30,
            help="Drafts untouched for this many days are deleted (default: 30)",
        )

    def execute_job(self, *args, **options):
        days = options.get("days", 30)
        stale = ApplicationDraft.objects.filter(updated_at__lt=now() - timedelta(days=days))
        count = stale.count()
        if not count:
            self.log_info("No stale drafts found")
            return 0

        if self.dry_run:
            self.log_info(f"Would delete {count} draft(s) older than {days} days")
            return count

        deleted, _ = stale.delete()
        self.log_info(f"Deleted {deleted} draft(s) older than {days} days")
        return deleted
