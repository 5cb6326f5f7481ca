"""
Management command to delete expired password reset tokens and old view records.
Run periodically (daily/weekly) to keep the tables small.
"""
from django.core.management.base import BaseCommand
from django.utils import timezone
from datetime import timedelta

from travel.models import View
from users.models import PasswordResetToken


class Command(BaseCommand):
    help = 'Delete expired password reset tokens and old view records'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=90,
            help='Delete view records older than X days (default: 90)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without actually deleting',
        )

    def handle(self, *args, **options):
        days = options['days']
        dry_run = options['dry_run']
        now = timezone.now()
        cutoff_date = now - timedelta(days=days)

        self.stdout.write('\n=== Cleanup ===')
        self.stdout.write(f'View cutoff date: {cutoff_date.strftime("%Y-%m-%d %H:%M:%S")}')

        expired_tokens = PasswordResetToken.objects.filter(expires__lt=now)
        old_views = View.objects.filter(created_at__lt=cutoff_date)
        token_count = expired_tokens.count()
        view_count = old_views.count()

        self.stdout.write(f'Expired reset tokens: {token_count}')
        self.stdout.write(f'View records older than {days} days: {view_count}')

        if token_count == 0 and view_count == 0:
            self.stdout.write(self.style.SUCCESS('Nothing to delete.'))
            return

        if dry_run:
            self.stdout.write(self.style.WARNING('\n[DRY RUN] No records were deleted.'))
            return

        deleted_tokens, _ = expired_tokens.delete()
        deleted_views, _ = old_views.delete()
        self.stdout.write(
            self.style.SUCCESS(f'\n✓ Deleted {deleted_tokens} tokens and {deleted_views} view records')
        )
