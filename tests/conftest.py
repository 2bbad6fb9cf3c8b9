import os
import uuid

import django
import pytest

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings")
os.environ.setdefault("TRENDING_PREFETCH_ENABLED", "False")
django.setup()

from django.core.cache.backends.locmem import LocMemCache  # noqa: E402

from trending.cache import ChartCache  # noqa: E402


@pytest.fixture
def chart_cache():
    return ChartCache(LocMemCache(f"test-{uuid.uuid4()}", {}), default_ttl=3600)


@pytest.fixture
def frozen_time(monkeypatch):
    """Controllable clock shared by the cache backend."""
    import time

    clock = {"now": 1_700_000_000.0}
    monkeypatch.setattr(time, "time", lambda: clock["now"])
    return clock
