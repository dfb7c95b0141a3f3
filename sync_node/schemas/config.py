"""Pydantic schemas for config endpoints."""

import dataclasses
from typing import Any, List

from pydantic import BaseModel

from common.types import ConfigSettings


class ConfigSnapshotResponse(BaseModel):
    """Response model for a Local or Server snapshot."""
    ping_map_disabled: bool
    display_portal_colour: bool
    double_portal_costs: bool

    @classmethod
    def from_settings(cls, settings: ConfigSettings) -> "ConfigSnapshotResponse":
        return cls(**dataclasses.asdict(settings))


class SettingEntryResponse(BaseModel):
    """Response model for one bound setting."""
    section: str
    key: str
    value: Any
    default: Any
    description: str


class SettingsListResponse(BaseModel):
    """Response model for the list of bound settings."""
    settings: List[SettingEntryResponse]


class UpdateSettingRequest(BaseModel):
    """Request model for an operator edit. The JSON type of value must match the setting."""
    value: Any
