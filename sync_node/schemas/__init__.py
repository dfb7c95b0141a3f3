"""Pydantic schemas for API requests and responses."""

from sync_node.schemas.config import (
    ConfigSnapshotResponse,
    SettingEntryResponse,
    SettingsListResponse,
    UpdateSettingRequest
)
from sync_node.schemas.internal import (
    RegisterParticipantRequest,
    RegisterParticipantResponse,
    ReceiveConfigResponse
)
from sync_node.schemas.common import ErrorResponse

__all__ = [
    "ConfigSnapshotResponse",
    "SettingEntryResponse",
    "SettingsListResponse",
    "UpdateSettingRequest",
    "RegisterParticipantRequest",
    "RegisterParticipantResponse",
    "ReceiveConfigResponse",
    "ErrorResponse"
]
