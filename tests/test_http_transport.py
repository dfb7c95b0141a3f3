"""Tests for the HTTP broadcast transport."""

import json
from unittest.mock import patch

import httpx
import pytest

from common.exceptions import TransportError
from sync_node.replication.http_transport import HttpBroadcastTransport, register_with_authority


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def no_sleep():
    with patch('sync_node.replication.http_transport.time.sleep') as sleep:
        yield sleep


class TestRegistration:
    """Test participant bookkeeping."""

    def test_register_strips_trailing_slash_and_dedups(self):
        transport = HttpBroadcastTransport(client=_client(lambda request: httpx.Response(200)))

        assert transport.register("http://10.0.0.5:8100/") is True
        assert transport.register("http://10.0.0.5:8100") is False
        assert transport.participants() == ["http://10.0.0.5:8100"]

    def test_unregister(self):
        transport = HttpBroadcastTransport(
            participants=["http://a:8100", "http://b:8100"],
            client=_client(lambda request: httpx.Response(200))
        )

        transport.unregister("http://a:8100/")

        assert transport.participants() == ["http://b:8100"]


class TestDelivery:
    """Test payload delivery."""

    def test_broadcast_posts_raw_payload_to_every_participant(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"accepted": True, "size": 2})

        transport = HttpBroadcastTransport(
            participants=["http://a:8100", "http://b:8100"],
            client=_client(handler)
        )

        delivered = transport.broadcast_to_participants(bytes([0x00, 0x01]))

        assert delivered == 2
        assert [str(r.url) for r in requests] == [
            "http://a:8100/internal/config",
            "http://b:8100/internal/config",
        ]
        assert all(r.content == b"\x00\x01" for r in requests)
        assert all(r.headers["content-type"] == "application/octet-stream" for r in requests)

    def test_send_retries_on_server_error(self, no_sleep):
        responses = iter([httpx.Response(503), httpx.Response(503), httpx.Response(200)])
        transport = HttpBroadcastTransport(
            max_retries=3,
            backoff=2,
            client=_client(lambda request: next(responses))
        )

        transport.send_to("http://a:8100", b"\x01\x01")

        assert [c.args[0] for c in no_sleep.call_args_list] == [1, 2]

    def test_send_does_not_retry_client_error(self, no_sleep):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, json={"detail": "truncated", "code": "MALFORMED_PAYLOAD"})

        transport = HttpBroadcastTransport(client=_client(handler))

        with pytest.raises(TransportError, match="status=400"):
            transport.send_to("http://a:8100", b"\x01")

        assert len(calls) == 1
        no_sleep.assert_not_called()

    def test_send_gives_up_after_max_retries(self, no_sleep):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        transport = HttpBroadcastTransport(max_retries=2, client=_client(handler))

        with pytest.raises(TransportError, match="3 attempt"):
            transport.send_to("http://a:8100", b"\x00\x00")

        assert no_sleep.call_count == 2

    def test_broadcast_skips_unreachable_participant(self, no_sleep):
        delivered_to = []

        def handler(request):
            if request.url.host == "down":
                raise httpx.ConnectError("connection refused", request=request)
            delivered_to.append(request.url.host)
            return httpx.Response(200)

        transport = HttpBroadcastTransport(
            participants=["http://down:8100", "http://up:8100"],
            max_retries=1,
            client=_client(handler)
        )

        assert transport.broadcast_to_participants(b"\x01\x00") == 1
        assert delivered_to == ["up"]


def test_register_with_authority_posts_address():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"address": "http://p1:8100", "newly_registered": True})

    register_with_authority(
        "http://authority:8100/",
        "http://p1:8100",
        client=_client(handler)
    )

    assert len(requests) == 1
    assert str(requests[0].url) == "http://authority:8100/internal/participants/register"
    assert json.loads(requests[0].content) == {"address": "http://p1:8100"}


def test_register_with_authority_raises_when_refused(no_sleep):
    with pytest.raises(TransportError):
        register_with_authority(
            "http://authority:8100",
            "http://p1:8100",
            client=_client(lambda request: httpx.Response(409))
        )
