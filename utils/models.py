from django.db import models
from django.utils import timezone


class CronJobLock(models.Model):
    """
    Database lock that keeps a scheduled command from running on two pods
    at once. Expired locks belong to crashed runs and may be taken over.
    """

    job_name = models.CharField(
        max_length=100, unique=True, help_text="Unique identifier for the scheduled job"
    )
    locked_by = models.CharField(
        max_length=100, help_text="Host and process that holds the lock"
    )
    locked_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField(
        help_text="After this time the lock is considered abandoned"
    )

    class Meta:
        db_table = "cronjob_locks"
        verbose_name = "CronJob Lock"
        verbose_name_plural = "CronJob Locks"
        indexes = [models.Index(fields=["expires_at"], name="cronjob_lock_expiry_idx")]

    def __str__(self):
        return f"{self.job_name} ({self.locked_by})"

    def is_expired(self):
        return timezone.now() > self.expires_at

    @classmethod
    def cleanup_expired_locks(cls):
        """Delete abandoned locks and return how many were removed."""
        deleted, _ = cls.objects.filter(expires_at__lt=timezone.now()).delete()
        return deleted
