"""FastAPI dependencies resolving the node components from app.state."""

from fastapi import Request

from sync_node.replication.replicator import ConfigReplicator
from sync_node.settings_store.config_file import ConfigFile


def get_replicator(request: Request) -> ConfigReplicator:
    """Dependency to get the node's config replicator"""
    return request.app.state.replicator


def get_config_file(request: Request) -> ConfigFile:
    """Dependency to get the node's backing config file"""
    return request.app.state.config_file


def get_transport(request: Request):
    """Dependency to get the node's outgoing transport (None on participants)"""
    return request.app.state.transport
