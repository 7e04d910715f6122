"""Exceptions raised by the cycle engine."""

from __future__ import annotations


class CycleEngineError(Exception):
    """Base class for every error the cycle engine raises."""


class InvalidProfile(CycleEngineError, ValueError):
    """Raised when a cycle profile write would break a profile invariant.

    Profiles are validated on every mutation and on snapshot import.  Values
    are never clamped after the fact; callers that want stepper semantics
    should use ``clamp_cycle_length()`` before writing.
    """


class SnapshotError(CycleEngineError, ValueError):
    """Raised when a snapshot payload cannot be decoded."""


class ConfigValidationError(CycleEngineError, ValueError):
    """Raised when cycle_config.yaml fails validation."""
