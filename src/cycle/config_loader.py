"""Load, validate, and hot-reload the cycle engine configuration.

The config lives in ``cycle_config.yaml`` alongside this module.  At startup
it is loaded once and cached.  Call ``reload_cycle_config()`` to re-read from
disk after an edit — no restart required.

Usage::

    from src.cycle.config_loader import get_cycle_config

    config = get_cycle_config()
    config.radar.lookahead_days      # 5
    config.phases.ovulation_start    # 12
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from src.cycle.errors import ConfigValidationError

logger = logging.getLogger("redprotocol.cycle.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "cycle_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class ProfileDefaults:
    """Default profile values and the settings-stepper bounds."""

    default_cycle_length: int = 28
    default_period_duration: int = 5
    default_partner_name: str = "Partner"
    min_cycle_length: int = 21
    max_cycle_length: int = 35


@dataclass
class PhaseThresholds:
    """Cycle-relative days at which the fixed phase bands begin."""

    ovulation_start: int = 12
    luteal_start: int = 16


@dataclass
class IntelConfig:
    """Intel translator settings."""

    stale_after_days: int = 45


@dataclass
class RadarConfig:
    """Radar predictor window."""

    lookahead_days: int = 5
    lookback_cycles: int = 3


@dataclass
class CycleConfig:
    """Complete, validated cycle engine configuration.

    This is the single in-memory representation of cycle_config.yaml.

    Attributes:
        version:            Config schema version string.
        profile:            Profile defaults and stepper bounds.
        phases:             Phase band thresholds.
        intel:              Stale-data threshold for the intel translator.
        radar:              Radar lookahead / lookback window.
        symptom_vocabulary: Enumerated symptom tags offered by the selector.
    """

    version: str
    profile: ProfileDefaults
    phases: PhaseThresholds
    intel: IntelConfig
    radar: RadarConfig
    symptom_vocabulary: list[str]
    _raw: dict = field(default_factory=dict, repr=False)

    def clamp_cycle_length(self, days: int) -> int:
        """Clamp a cycle length into the settings-stepper range.

        Args:
            days: Requested cycle length.

        Returns:
            ``days`` limited to [min_cycle_length, max_cycle_length].
        """
        return max(self.profile.min_cycle_length, min(self.profile.max_cycle_length, days))


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    try:
        import yaml  # pyyaml
    except ImportError as exc:
        raise ImportError(
            "pyyaml is required for config loading. Install with: pip install pyyaml"
        ) from exc

    if not path.exists():
        raise FileNotFoundError(f"Cycle config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> CycleConfig:
    """Validate the raw YAML dict and construct a CycleConfig.

    Missing sections fall back to the dataclass defaults.  Every problem is
    collected before raising so one edit can fix them all.

    Args:
        raw: Parsed YAML dict.

    Returns:
        Validated CycleConfig instance.

    Raises:
        ConfigValidationError: If any value is missing or out of range.
    """
    errors: list[str] = []

    def _int(section: dict, key: str, default: int, path: str, minimum: int = 0) -> int:
        value = section.get(key, default)
        try:
            number = int(value)
        except (TypeError, ValueError):
            errors.append(f"{path}.{key} must be an integer, got {value!r}")
            return default
        if number < minimum:
            errors.append(f"{path}.{key} = {number} must be >= {minimum}")
        return number

    version = str(raw.get("version", "1.0"))

    # ── Profile defaults ──
    p_raw = raw.get("profile") or {}
    profile = ProfileDefaults(
        default_cycle_length=_int(p_raw, "default_cycle_length", 28, "profile", 1),
        default_period_duration=_int(p_raw, "default_period_duration", 5, "profile"),
        default_partner_name=str(p_raw.get("default_partner_name", "Partner")),
        min_cycle_length=_int(p_raw, "min_cycle_length", 21, "profile", 1),
        max_cycle_length=_int(p_raw, "max_cycle_length", 35, "profile", 1),
    )
    if profile.min_cycle_length > profile.max_cycle_length:
        errors.append(
            f"profile.min_cycle_length ({profile.min_cycle_length}) exceeds "
            f"profile.max_cycle_length ({profile.max_cycle_length})"
        )
    if profile.default_period_duration >= profile.default_cycle_length:
        errors.append(
            "profile.default_period_duration must be shorter than "
            "profile.default_cycle_length"
        )

    # ── Phase thresholds ──
    ph_raw = raw.get("phases") or {}
    phases = PhaseThresholds(
        ovulation_start=_int(ph_raw, "ovulation_start", 12, "phases", 1),
        luteal_start=_int(ph_raw, "luteal_start", 16, "phases", 1),
    )
    if phases.ovulation_start >= phases.luteal_start:
        errors.append("phases.ovulation_start must come before phases.luteal_start")
    if profile.default_period_duration >= phases.ovulation_start:
        errors.append(
            "profile.default_period_duration must be shorter than phases.ovulation_start"
        )

    # ── Intel ──
    in_raw = raw.get("intel") or {}
    intel = IntelConfig(
        stale_after_days=_int(in_raw, "stale_after_days", 45, "intel", 1),
    )

    # ── Radar ──
    r_raw = raw.get("radar") or {}
    radar = RadarConfig(
        lookahead_days=_int(r_raw, "lookahead_days", 5, "radar", 1),
        lookback_cycles=_int(r_raw, "lookback_cycles", 3, "radar", 1),
    )

    # ── Symptom vocabulary ──
    vocab_raw = (raw.get("symptoms") or {}).get("vocabulary", [])
    vocabulary: list[str] = []
    if not isinstance(vocab_raw, list):
        errors.append("symptoms.vocabulary must be a list of strings")
    else:
        for tag in vocab_raw:
            if not isinstance(tag, str) or not tag.strip():
                errors.append(f"symptoms.vocabulary contains an invalid tag: {tag!r}")
            elif tag in vocabulary:
                errors.append(f"symptoms.vocabulary lists {tag!r} more than once")
            else:
                vocabulary.append(tag)

    if errors:
        raise ConfigValidationError(
            f"cycle_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return CycleConfig(
        version=version,
        profile=profile,
        phases=phases,
        intel=intel,
        radar=radar,
        symptom_vocabulary=vocabulary,
        _raw=raw,
    )


def load_cycle_config(path: Path | None = None) -> CycleConfig:
    """Load and validate the cycle config from disk.

    Args:
        path: Override path to YAML. Uses the bundled cycle_config.yaml by default.

    Returns:
        Validated CycleConfig instance.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded cycle config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: CycleConfig | None = None
_config_lock = threading.Lock()


def get_cycle_config() -> CycleConfig:
    """Return the global CycleConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_cycle_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_cycle_config()
    return _config


def reload_cycle_config(path: Path | None = None) -> CycleConfig:
    """Reload the cycle config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Args:
        path: Override path to YAML. Defaults to bundled cycle_config.yaml.

    Returns:
        The newly loaded CycleConfig.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_cycle_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded cycle config: %s → %s", old_version, new_config.version)
    return new_config
