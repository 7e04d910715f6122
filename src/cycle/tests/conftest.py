"""Shared fixtures for cycle engine tests."""

from __future__ import annotations

from datetime import date

import pytest

from src.cycle.config_loader import CycleConfig, load_cycle_config
from src.cycle.engine import CycleEngine
from src.cycle.log_store import LogStore

# Anchor used by the documented scenarios
ANCHOR = date(2024, 1, 1)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cycle_config() -> CycleConfig:
    """Load the real cycle config for tests."""
    return load_cycle_config()


# ---------------------------------------------------------------------------
# State fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store(cycle_config: CycleConfig) -> LogStore:
    """Fresh store with the default profile and no anchor."""
    return LogStore(cycle_config)


@pytest.fixture
def anchored_store(store: LogStore) -> LogStore:
    """Store anchored on 2024-01-01 with a 28/5 profile."""
    store.set_profile(anchor_date=ANCHOR, cycle_length=28, period_duration=5)
    return store


@pytest.fixture
def engine(cycle_config: CycleConfig) -> CycleEngine:
    return CycleEngine(cycle_config)


@pytest.fixture
def anchored_engine(engine: CycleEngine) -> CycleEngine:
    engine.set_profile(anchor_date=ANCHOR, cycle_length=28, period_duration=5)
    return engine
