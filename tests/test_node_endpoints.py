"""Tests for the sync node HTTP API."""

import time
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from common.types import Role
from sync_node.main import create_app
from sync_node.replication.http_transport import HttpBroadcastTransport
from sync_node.replication.replicator import ConfigReplicator


@pytest.fixture
def authority_client(authority, config_file, hub):
    """Create a test client for an authority node broadcasting through the hub."""
    return TestClient(create_app(authority, config_file, transport=hub))


@pytest.fixture
def participant_node(make_participant):
    """Create a participant replicator and a test client serving it."""
    replicator, participant_file = make_participant("p1")
    return replicator, TestClient(create_app(replicator, participant_file))


def test_health_reports_role(authority_client, participant_node):
    _, participant_client = participant_node

    assert authority_client.get('/health').json() == {
        "status": "healthy", "service": "sync_node", "role": "authority"
    }
    assert participant_client.get('/health').json()["role"] == "participant"


def test_get_local_and_server_snapshots(authority_client):
    expected = {
        "ping_map_disabled": False,
        "display_portal_colour": False,
        "double_portal_costs": False
    }

    assert authority_client.get('/config/local').json() == expected
    assert authority_client.get('/config/server').json() == expected


def test_list_settings(authority_client):
    response = authority_client.get('/config/settings')

    assert response.status_code == 200
    settings = response.json()["settings"]
    assert [s["key"] for s in settings] == [
        "PingMapDisabled", "DisplayPortalColour", "DoublePortalCosts", "NexusID"
    ]
    assert all(s["value"] is False and s["default"] is False for s in settings[:3])
    assert settings[3]["value"] == 102
    assert "enforced" in settings[0]["description"]


def test_update_setting_replicates_to_participant(authority_client, participant_node):
    participant, participant_client = participant_node

    response = authority_client.put(
        '/config/settings/General/DoublePortalCosts', json={"value": True}
    )

    assert response.status_code == 200
    assert response.json()["value"] is True
    assert authority_client.get('/config/server').json()["double_portal_costs"] is True
    assert participant.server.double_portal_costs is True
    assert participant_client.get('/config/server').json()["double_portal_costs"] is True
    assert participant_client.get('/config/local').json()["double_portal_costs"] is False


def test_update_unknown_setting_returns_404(authority_client):
    response = authority_client.put('/config/settings/General/Missing', json={"value": True})

    assert response.status_code == 404
    assert response.json()["code"] == "UNKNOWN_SETTING"


def test_update_with_wrong_type_returns_422(authority_client):
    response = authority_client.put(
        '/config/settings/General/PingMapDisabled', json={"value": "yes"}
    )

    assert response.status_code == 422
    assert response.json()["code"] == "SETTING_TYPE_MISMATCH"


def test_participant_accepts_config_payload(participant_node):
    participant, client = participant_node

    response = client.post(
        '/internal/config',
        content=b"\x01\x01",
        headers={"Content-Type": "application/octet-stream"}
    )

    assert response.status_code == 200
    assert response.json() == {"accepted": True, "size": 2}
    assert participant.server.ping_map_disabled is True
    assert participant.server.double_portal_costs is True


def test_participant_rejects_truncated_payload(participant_node):
    participant, client = participant_node
    events = []
    participant.on_server_config_changed.subscribe(lambda: events.append(True))

    response = client.post('/internal/config', content=b"\x01")

    assert response.status_code == 400
    assert response.json()["code"] == "MALFORMED_PAYLOAD"
    assert participant.server.ping_map_disabled is False
    assert events == []


def test_authority_rejects_config_payload(authority_client):
    response = authority_client.post('/internal/config', content=b"\x01\x01")

    assert response.status_code == 409
    assert response.json()["code"] == "ROLE_VIOLATION"


def test_participant_rejects_registration(participant_node):
    _, client = participant_node

    response = client.post('/internal/participants/register', json={"address": "http://p2:8100"})

    assert response.status_code == 409
    assert response.json()["code"] == "ROLE_VIOLATION"


def test_authority_registers_and_syncs_participant(config_file, settings_store):
    pushed = []

    def handler(request):
        pushed.append((str(request.url), request.content))
        return httpx.Response(200, json={"accepted": True, "size": len(request.content)})

    transport = HttpBroadcastTransport(client=httpx.Client(transport=httpx.MockTransport(handler)))
    replicator = ConfigReplicator(Role.AUTHORITY, transport)
    replicator.initialize(settings_store)
    config_file.set("General", "PingMapDisabled", True)
    client = TestClient(create_app(replicator, config_file, transport=transport))

    response = client.post('/internal/participants/register', json={"address": "http://p2:8100/"})

    assert response.status_code == 200
    assert response.json()["newly_registered"] is True
    assert transport.participants() == ["http://p2:8100"]
    assert pushed == [("http://p2:8100/internal/config", b"\x01\x00")]


def test_hub_authority_syncs_connected_participant(authority_client, config_file, make_participant):
    config_file.set("General", "DoublePortalCosts", True)
    participant, _ = make_participant("p1")
    assert participant.server.double_portal_costs is False

    response = authority_client.post('/internal/participants/register', json={"address": "p1"})

    assert response.status_code == 200
    assert response.json() == {"address": "p1", "newly_registered": False}
    assert participant.server.double_portal_costs is True


def test_hub_authority_rejects_unknown_participant(authority_client):
    response = authority_client.post('/internal/participants/register', json={"address": "ghost"})

    assert response.status_code == 502
    assert response.json()["code"] == "PARTICIPANT_UNREACHABLE"


def test_responses_carry_request_id(authority_client):
    response = authority_client.get('/health', headers={"X-Request-ID": "abc"})

    assert response.headers["X-Request-ID"] == "abc"


def test_participant_keeps_re_registering_with_authority(make_participant):
    replicator, participant_file = make_participant("p1")
    app = create_app(
        replicator,
        participant_file,
        authority_url="http://authority:8100",
        advertise_addr="http://p1:8100",
        register_interval=0.01
    )

    with patch('sync_node.main.register_with_authority') as register:
        with TestClient(app):
            deadline = time.time() + 5
            while register.call_count < 3 and time.time() < deadline:
                time.sleep(0.01)

    assert register.call_count >= 3
    assert register.call_args.args[:2] == ("http://authority:8100", "http://p1:8100")
