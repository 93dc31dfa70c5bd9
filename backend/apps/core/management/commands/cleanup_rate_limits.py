"""
Management command to purge idle rate limit windows.

The lookup API already purges stale windows on a small fraction of
requests; run this from cron to bound the table on quiet deployments.
Example: ./manage.py cleanup_rate_limits --idle-seconds 3600
"""

from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.core.models import RateLimitWindow
from apps.core.throttling import HOUR_WINDOW_SECONDS, SlidingWindowRateLimiter


class Command(BaseCommand):
    help = "Delete rate limit windows that have been idle longer than the hour window"

    def add_arguments(self, parser):
        parser.add_argument(
            "--idle-seconds",
            type=int,
            default=HOUR_WINDOW_SECONDS,
            help=f"Delete windows idle for longer than this (default: {HOUR_WINDOW_SECONDS})",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be deleted without actually deleting",
        )

    def handle(self, *args, **options):
        idle_seconds = options["idle_seconds"]

        if options["dry_run"]:
            cutoff = timezone.now() - timedelta(seconds=idle_seconds)
            count = RateLimitWindow.objects.filter(updated_at__lt=cutoff).count()
            self.stdout.write(
                self.style.WARNING(f"[DRY RUN] Would delete {count} rate limit windows")
            )
            return

        deleted = SlidingWindowRateLimiter().purge_stale(max_idle_seconds=idle_seconds)
        self.stdout.write(self.style.SUCCESS(f"Successfully deleted {deleted} rate limit windows"))
