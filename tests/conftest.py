"""Shared pytest fixtures for all tests."""

import pytest

from common.types import Role
from sync_node.replication.replicator import ConfigReplicator
from sync_node.replication.transport import InMemoryHub
from sync_node.settings_store import ConfigFile, SettingsStore


@pytest.fixture
def config_path(tmp_path):
    """
    Path of a not yet existing config file.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to authority.json inside a temporary data directory
    """
    return tmp_path / 'data' / 'authority.json'


@pytest.fixture
def config_file(config_path):
    """
    ConfigFile backed by the temporary config path.
    """
    return ConfigFile(str(config_path))


@pytest.fixture
def settings_store(config_file):
    """
    SettingsStore loaded from the temporary config file.
    """
    store = SettingsStore()
    store.load(config_file)
    return store


@pytest.fixture
def hub():
    """
    In-process transport shared by the authority and its participants.
    """
    return InMemoryHub()


@pytest.fixture
def authority(settings_store, hub):
    """
    Initialized authority replicator broadcasting through the hub.
    """
    replicator = ConfigReplicator(Role.AUTHORITY, hub)
    replicator.initialize(settings_store)
    return replicator


@pytest.fixture
def make_participant(tmp_path, hub):
    """
    Factory creating participants with their own config file, connected to the hub.

    Returns:
        Callable taking a participant name and returning (replicator, config_file)
    """
    def _make(name: str):
        participant_file = ConfigFile(str(tmp_path / 'data' / f'{name}.json'))
        store = SettingsStore()
        store.load(participant_file)

        replicator = ConfigReplicator(Role.PARTICIPANT)
        replicator.initialize(store)
        hub.connect(name, replicator.receive_server_config)
        return replicator, participant_file

    return _make
