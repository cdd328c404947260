import logging
import os
import socket
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import IntegrityError, transaction
from django.utils import timezone

from utils.models import CronJobLock

logger = logging.getLogger(__name__)


class BaseCronJobCommand(BaseCommand):
    """
    Base class for scheduled management commands.

    Subclasses set ``job_name`` and implement ``execute_job``. A
    ``CronJobLock`` row guarantees a single running instance per job; a lock
    older than ``max_execution_time`` is treated as abandoned.
    """

    job_name = None
    max_execution_time = timedelta(hours=1)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not self.job_name:
            raise ValueError(f"{self.__class__.__name__} must define job_name")
        self.pod_id = f"{socket.gethostname()}-{os.getpid()}"
        self.lock_acquired = False
        self.verbosity = 1
        self.dry_run = False

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Run even if another instance holds the lock",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would be done without changing anything",
        )

    def handle(self, *args, **options):
        self.verbosity = options.get("verbosity", 1)
        self.dry_run = options.get("dry_run", False)

        CronJobLock.cleanup_expired_locks()

        self.result = None
        if not self.dry_run and not options.get("force") and not self.acquire_lock():
            return

        start_time = timezone.now()
        self.stdout.write(self.style.NOTICE(f"Starting {self.job_name} on {self.pod_id}"))
        try:
            result = self.execute_job(*args, **options)
        except Exception:
            logger.exception("Scheduled job %s failed", self.job_name)
            raise
        finally:
            if self.lock_acquired:
                self.release_lock()

        elapsed = (timezone.now() - start_time).total_seconds()
        self.stdout.write(self.style.SUCCESS(f"Completed {self.job_name} in {elapsed:.2f}s"))
        # Django writes whatever handle() returns to stdout
        self.result = result

    def acquire_lock(self):
        expires_at = timezone.now() + self.max_execution_time
        try:
            with transaction.atomic():
                CronJobLock.objects.create(
                    job_name=self.job_name, locked_by=self.pod_id, expires_at=expires_at
                )
        except IntegrityError:
            existing = CronJobLock.objects.filter(job_name=self.job_name).first()
            if existing is None:
                return self.acquire_lock()
            if not existing.is_expired():
                self.stdout.write(
                    self.style.WARNING(
                        f"Job {self.job_name} is already running on {existing.locked_by}"
                    )
                )
                return False
            updated = CronJobLock.objects.filter(
                pk=existing.pk, expires_at=existing.expires_at
            ).update(locked_by=self.pod_id, locked_at=timezone.now(), expires_at=expires_at)
            if not updated:
                return False
        self.lock_acquired = True
        return True

    def release_lock(self):
        CronJobLock.objects.filter(job_name=self.job_name, locked_by=self.pod_id).delete()
        self.lock_acquired = False

    def execute_job(self, *args, **options):
        raise NotImplementedError(
            f"{self.__class__.__name__} must implement execute_job() method"
        )

    def log_info(self, message):
        if self.verbosity >= 1:
            self.stdout.write(message)
