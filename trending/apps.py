import sys

from django.apps import AppConfig
from django.conf import settings


class TrendingConfig(AppConfig):
    name = "trending"
    verbose_name = "App Store Trending"

    def ready(self):
        if not settings.TRENDING_PREFETCH_ENABLED:
            return

        # Don't start the prefetcher during management commands
        skip_commands = {"migrate", "makemigrations", "collectstatic", "check", "shell", "test"}
        if any(cmd in sys.argv for cmd in skip_commands):
            return

        from .scheduler import start_scheduler

        start_scheduler()
