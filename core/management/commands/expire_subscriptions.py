from django.core.management.base import BaseCommand
from django.utils import timezone

from core.services.hospitals import expire_subscriptions


class Command(BaseCommand):
    help = "Mark hospitals whose subscription expiry has passed as expired. Run daily from cron."

    def handle(self, *args, **options):
        now = timezone.now()
        count = expire_subscriptions(now)
        self.stdout.write(self.style.SUCCESS(f"Expired {count} hospital(s) at {now}"))
