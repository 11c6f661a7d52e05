"""
Management command to send scheduled push ads whose time has come

Run from cron, e.g. every minute:
    python manage.py send_scheduled_push_ads
"""
from django.core.management.base import BaseCommand
from django.utils import timezone

from travelmall.marketing.models import PushAd
from travelmall.marketing.push import send_due_push_ads


class Command(BaseCommand):
    help = "Sends scheduled push ads that are due"

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List due push ads without sending them',
        )

    def handle(self, *args, **options):
        now = timezone.now()
        due = PushAd.objects.filter(status='scheduled', scheduled_at__lte=now).order_by('scheduled_at')

        if options['dry_run']:
            self.stdout.write(f"Due push ads: {due.count()}")
            for push_ad in due:
                self.stdout.write(f"  - [{push_ad.id}] {push_ad.title} (scheduled {push_ad.scheduled_at})")
            return

        sent, failed = send_due_push_ads(now)
        self.stdout.write(self.style.SUCCESS(f"Push ads sent: {sent}"))
        if failed:
            self.stdout.write(self.style.ERROR(f"Push ads failed: {failed}"))
