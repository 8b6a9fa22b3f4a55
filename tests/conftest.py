"""
Shared pytest fixtures for clusterconfig tests.

This module provides common fixtures including:
- A running home context and views bound to it
- Redis mocks for audit tests
- A static configuration provider for app tests
"""

import os
import sys
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from clusterconfig.config.provider import (
    AccessConfig,
    APIConfig,
    MetadataConfig,
    StorageConfig,
)
from clusterconfig.modules.metadata import HomeContext, InMemoryMetadataView
from clusterconfig.modules.table import ConfigTable


# =============================================================================
# Home context and shared metadata
# =============================================================================


@pytest.fixture
def home_context():
    """Home context running on its own thread for the duration of a test."""
    home = HomeContext(name="test-home")
    home.start()
    yield home
    home.stop()


@pytest.fixture
def shared_view(home_context):
    """View owned by the home thread, so every access is a cross-thread handoff."""
    return InMemoryMetadataView(home_context.loop)


@pytest.fixture
def table(shared_view):
    """Table wired to the home-thread view, without an audit log."""
    return ConfigTable.build(shared_view)


# =============================================================================
# Redis mocks
# =============================================================================


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    redis = AsyncMock()
    redis.lpush = AsyncMock()
    redis.ltrim = AsyncMock()
    redis.lrange = AsyncMock(return_value=[])
    redis.ping = AsyncMock(return_value=True)
    return redis


# =============================================================================
# Configuration
# =============================================================================


class StaticConfigProvider:
    """Config provider with fixed values, so tests do not depend on the environment."""

    def __init__(
        self,
        api_keys: Optional[List[str]] = None,
        require_auth: bool = True,
        home_context: str = "thread",
        redis_url: Optional[str] = None,
    ):
        self.api_keys = api_keys if api_keys is not None else ["test-key", "admin:admin-key"]
        self.require_auth = require_auth
        self.home_context = home_context
        self.redis_url = redis_url

    def get_api_config(self) -> APIConfig:
        return APIConfig(host="127.0.0.1", port=8080, debug=False, log_level="INFO")

    def get_access_config(self) -> AccessConfig:
        return AccessConfig(require_auth=self.require_auth, api_keys=self.api_keys)

    def get_storage_config(self) -> StorageConfig:
        return StorageConfig(redis_url=self.redis_url, audit_max_events=100)

    def get_metadata_config(self) -> MetadataConfig:
        return MetadataConfig(home_context=self.home_context)


@pytest.fixture
def config_provider():
    return StaticConfigProvider()
