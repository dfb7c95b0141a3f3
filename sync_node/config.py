"""Configuration settings for a sync node, read from the environment."""

import os
import socket

from common.constants import DEFAULT_NODE_PORT
from common.types import Role


def get_container_ip() -> str:
    """
    Get the node's IP address on the container network.

    Uses the routing table approach to find the outgoing interface IP.
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect(('8.8.8.8', 80))
        ip = s.getsockname()[0]
    except OSError:
        try:
            ip = socket.gethostbyname(socket.gethostname())
        except OSError:
            ip = "127.0.0.1"
    finally:
        s.close()
    return ip


def _split_urls(raw: str) -> list:
    return [url.strip() for url in raw.split(",") if url.strip()]


NODE_ROLE = Role(os.environ.get("PORTALSYNC_ROLE", "participant").strip().lower())

CONFIG_PATH = os.environ.get("PORTALSYNC_CONFIG_PATH", "/app/data/portal_sync.json")

NODE_HOST = os.environ.get("PORTALSYNC_HOST", "0.0.0.0")

NODE_PORT = int(os.environ.get("PORTALSYNC_PORT", str(DEFAULT_NODE_PORT)))

AUTHORITY_URL = os.environ.get("PORTALSYNC_AUTHORITY_URL") or None

PARTICIPANT_URLS = _split_urls(os.environ.get("PORTALSYNC_PARTICIPANTS", ""))

WATCH_INTERVAL = float(os.environ.get("PORTALSYNC_WATCH_INTERVAL", "2.0"))

# Seconds between participant re-registrations with the authority; 0 registers once.
REGISTER_INTERVAL = float(os.environ.get("PORTALSYNC_REGISTER_INTERVAL", "30.0"))

HTTP_TIMEOUT = float(os.environ.get("PORTALSYNC_HTTP_TIMEOUT", "5.0"))

MAX_RETRIES = int(os.environ.get("PORTALSYNC_MAX_RETRIES", "3"))

RETRY_BACKOFF = float(os.environ.get("PORTALSYNC_RETRY_BACKOFF", "2"))


def get_advertise_addr() -> str:
    """
    Base URL other nodes use to reach this one.
    """
    return os.environ.get("PORTALSYNC_ADVERTISE_ADDR") or f"http://{get_container_ip()}:{NODE_PORT}"
