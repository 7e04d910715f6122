"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends

from src.config import Settings, get_settings
from src.cycle.config_loader import get_cycle_config, load_cycle_config
from src.cycle.engine import CycleEngine

logger = logging.getLogger("redprotocol.dependencies")


@lru_cache
def get_cycle_engine() -> CycleEngine:
    """Return the process-wide engine.

    The engine is the single owner of cycle state; every request handler
    shares this one instance.
    """
    settings = get_settings()
    if settings.cycle_config_path:
        config = load_cycle_config(Path(settings.cycle_config_path))
    else:
        config = get_cycle_config()
    logger.info("Created cycle engine (config v%s)", config.version)
    return CycleEngine(config)


# Annotated shortcuts for route signatures
Engine = Annotated[CycleEngine, Depends(get_cycle_engine)]
AppSettings = Annotated[Settings, Depends(get_settings)]
