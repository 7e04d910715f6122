"""Shared Pydantic base model for Red Protocol schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ProtocolBase(BaseModel):
    """Base model with shared config for all Red Protocol schemas."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ErrorDetail(BaseModel):
    detail: str
