"""Pytest configuration and fixtures."""

import pytest

from blob_core.backends.memory import InMemoryBlobStorage


@pytest.fixture
def storage():
    """Create an empty in-memory blob storage."""
    return InMemoryBlobStorage()


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary for testing."""
    return {
        "name": "test-storage",
        "storage": {"backend": "memory", "options": {}},
        "logging": {"level": "debug", "format": "text"},
    }
