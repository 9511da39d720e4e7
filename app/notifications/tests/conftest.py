"""
Pytest fixtures for notification tests.

get_registry() is cached; registry_class swaps the configured class and
clears the cache on both sides of the test.
"""

import pytest

from notifications.registry import get_registry
from notifications.tests.registries import RecordingRegistry


@pytest.fixture
def registry_class(settings):
    def use(dotted_path):
        settings.NOTIFICATIONS_CONNECTION_REGISTRY = dotted_path
        get_registry.cache_clear()

    RecordingRegistry.sent = []
    get_registry.cache_clear()
    yield use
    get_registry.cache_clear()


@pytest.fixture
def recording_registry(registry_class):
    registry_class("notifications.tests.registries.RecordingRegistry")
    return RecordingRegistry


@pytest.fixture
def broken_registry(registry_class):
    registry_class("notifications.tests.registries.BrokenRegistry")
