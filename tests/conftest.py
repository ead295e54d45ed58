"""
EmberGuard - Test Fixtures
==========================

Shared fixtures for all tests.
"""

import os
import tempfile

# Keep test logs out of the working tree; must run before emberguard imports
os.environ.setdefault("EMBERGUARD_LOG_DIR", tempfile.mkdtemp(prefix="emberguard-logs-"))

from typing import Any, Dict, Optional

import pytest

from emberguard.api.dependencies import set_engine
from emberguard.core.config import EngineConfig
from emberguard.engine import ModerationEngine
from emberguard.models.community import CommunityConfig
from emberguard.models.events import JoinEvent, MessageEvent
from emberguard.storage import ConfigStore


# Tuesday 2023-11-14 17:13:20 in New York
BASE_TIME = 1_700_000_000.0


# =============================================================================
# Clock
# =============================================================================

class FakeClock:
    """Manually advanced clock injected wherever time.time would be."""

    def __init__(self, start: float = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# Config
# =============================================================================

def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@pytest.fixture
def make_config():
    """Factory building a CommunityConfig from nested overrides."""

    def factory(**overrides) -> CommunityConfig:
        return CommunityConfig.from_stored(_merge(CommunityConfig().to_record(), overrides))

    return factory


@pytest.fixture
def spam_config(make_config):
    """Anti-spam on at the default threshold."""
    return make_config(anti_spam={"enabled": True, "heat_threshold": 3})


# =============================================================================
# Storage & Engine
# =============================================================================

@pytest.fixture
def store(tmp_path):
    return ConfigStore(tmp_path / "data", lock_timeout=5.0, retry_base_delay=0.0)


@pytest.fixture
def settings(tmp_path):
    return EngineConfig(
        data_dir=tmp_path / "engine-data",
        lock_timeout=10.0,
        maintenance_interval=60,
    )


@pytest.fixture
def engine(settings, clock):
    engine = ModerationEngine(settings=settings, clock=clock)
    yield engine
    set_engine(None)


# =============================================================================
# Events
# =============================================================================

@pytest.fixture
def message():
    """Factory for MessageEvent with sensible defaults."""

    def factory(
        content: str = "hello",
        actor_id: str = "user-1",
        community_id: str = "guild-1",
        channel_id: str = "channel-1",
        timestamp: Optional[float] = None,
        **kwargs,
    ) -> MessageEvent:
        return MessageEvent(
            actor_id=actor_id,
            community_id=community_id,
            channel_id=channel_id,
            content=content,
            timestamp=timestamp,
            **kwargs,
        )

    return factory


@pytest.fixture
def join():
    """Factory for JoinEvent; accounts are a year old with an avatar by default."""

    def factory(
        actor_id: str = "joiner-1",
        community_id: str = "guild-1",
        account_age_days: float = 365,
        has_avatar: bool = True,
        timestamp: float = BASE_TIME,
    ) -> JoinEvent:
        return JoinEvent(
            actor_id=actor_id,
            community_id=community_id,
            account_created_at=timestamp - account_age_days * 86400,
            has_avatar=has_avatar,
            timestamp=timestamp,
        )

    return factory
