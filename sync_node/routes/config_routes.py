"""Operator routes for inspecting and editing the node's config."""

from fastapi import APIRouter, Depends

from sync_node.replication.replicator import ConfigReplicator
from sync_node.routes.dependencies import get_config_file, get_replicator
from sync_node.schemas import (
    ConfigSnapshotResponse,
    ErrorResponse,
    SettingEntryResponse,
    SettingsListResponse,
    UpdateSettingRequest
)
from sync_node.settings_store.config_file import ConfigEntry, ConfigFile
from common.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/config", tags=["config"])


def _entry_response(entry: ConfigEntry) -> SettingEntryResponse:
    return SettingEntryResponse(
        section=entry.section,
        key=entry.key,
        value=entry.value,
        default=entry.definition.default,
        description=entry.definition.description
    )


@router.get("/local", response_model=ConfigSnapshotResponse)
def get_local_config(replicator: ConfigReplicator = Depends(get_replicator)):
    """
    Return this node's resolved Local snapshot.
    """
    return ConfigSnapshotResponse.from_settings(replicator.local)


@router.get("/server", response_model=ConfigSnapshotResponse)
def get_server_config(replicator: ConfigReplicator = Depends(get_replicator)):
    """
    Return the Server snapshot (the authority's config as last seen by this node).
    """
    return ConfigSnapshotResponse.from_settings(replicator.server)


@router.get("/settings", response_model=SettingsListResponse)
def list_settings(config_file: ConfigFile = Depends(get_config_file)):
    """
    List every bound setting with its value, default and description.
    """
    return SettingsListResponse(
        settings=[_entry_response(entry) for entry in config_file.entries()]
    )


@router.put(
    "/settings/{section}/{key}",
    response_model=SettingEntryResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}
)
def update_setting(
    section: str,
    key: str,
    request: UpdateSettingRequest,
    config_file: ConfigFile = Depends(get_config_file)
):
    """
    Change a setting in the backing store.

    The change goes through the store's notifications, so on the authority it
    is broadcast before this request returns.
    """
    logger.info(f"Operator update requested: {section}.{key} = {request.value!r}")
    entry = config_file.set(section, key, request.value)
    return _entry_response(entry)
