"""
HTTP transport: the authority posts raw config payloads to each participant's
/internal/config endpoint.
"""

import logging
import threading
import time
from typing import Iterable, List, Optional

import httpx

from common.exceptions import TransportError

logger = logging.getLogger(__name__)

CONFIG_ENDPOINT = "/internal/config"
REGISTER_ENDPOINT = "/internal/participants/register"
OCTET_STREAM = "application/octet-stream"


def _post_with_retry(
    client: httpx.Client,
    url: str,
    max_retries: int,
    backoff: float,
    **kwargs
) -> httpx.Response:
    """
    POST with retry on 5xx responses and network failures.

    Args:
        client: HTTP client
        url: Absolute target URL
        max_retries: Retry attempts after the first one
        backoff: Base of the exponential delay between attempts
        **kwargs: Passed through to httpx

    Returns:
        Successful (2xx) response

    Raises:
        TransportError: On a 4xx response, or once retries are exhausted
    """
    last_error = None

    for attempt in range(max_retries + 1):
        try:
            response = client.post(url, **kwargs)
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            last_error = f"{type(e).__name__}: {e}"
        else:
            if response.status_code < 400:
                return response
            if response.status_code < 500:
                raise TransportError(
                    f"{url} rejected request: status={response.status_code} body={response.text}"
                )
            last_error = f"status={response.status_code}"

        if attempt < max_retries:
            delay = backoff ** attempt
            logger.warning(
                f"Delivery failed (attempt {attempt + 1}/{max_retries + 1}): "
                f"{url} {last_error}, retrying in {delay}s"
            )
            time.sleep(delay)

    raise TransportError(f"Delivery to {url} failed after {max_retries + 1} attempt(s): {last_error}")


class HttpBroadcastTransport:
    """
    Broadcasts payloads to a set of participant base URLs over HTTP.

    A participant that stays unreachable after retries is logged and skipped
    so the broadcast still reaches everyone else.
    """

    def __init__(
        self,
        participants: Iterable[str] = (),
        timeout: float = 5.0,
        max_retries: int = 3,
        backoff: float = 2,
        client: Optional[httpx.Client] = None
    ):
        """
        Initialize the transport.

        Args:
            participants: Initial participant base URLs (e.g., "http://10.0.0.5:8100")
            timeout: Per request timeout in seconds
            max_retries: Retry attempts per delivery
            backoff: Exponential backoff base in seconds
            client: Preconfigured httpx client (tests inject a MockTransport here)
        """
        self.max_retries = max_retries
        self.backoff = backoff
        self.client = client or httpx.Client(timeout=timeout)
        self._lock = threading.Lock()
        self._participants: List[str] = []

        for address in participants:
            self.register(address)

    def register(self, address: str) -> bool:
        """
        Add a participant.

        Returns:
            True if the participant was not known yet
        """
        address = address.rstrip('/')
        with self._lock:
            if address in self._participants:
                return False
            self._participants.append(address)
        logger.info(f"Participant registered [address={address}]")
        return True

    def unregister(self, address: str) -> None:
        with self._lock:
            if address.rstrip('/') in self._participants:
                self._participants.remove(address.rstrip('/'))

    def participants(self) -> List[str]:
        with self._lock:
            return list(self._participants)

    def broadcast_to_participants(self, payload: bytes) -> int:
        """
        Send payload to every registered participant.

        Returns:
            Number of participants that acknowledged the payload
        """
        delivered = 0
        for address in self.participants():
            try:
                self.send_to(address, payload)
                delivered += 1
            except TransportError as e:
                logger.error(f"Broadcast to {address} failed: {e}")

        logger.debug(f"Broadcast {len(payload)} byte(s) to {delivered}/{len(self.participants())} participant(s)")
        return delivered

    def send_to(self, participant: str, payload: bytes) -> None:
        _post_with_retry(
            self.client,
            f"{participant.rstrip('/')}{CONFIG_ENDPOINT}",
            self.max_retries,
            self.backoff,
            content=bytes(payload),
            headers={"Content-Type": OCTET_STREAM},
        )

    def close(self) -> None:
        self.client.close()


def register_with_authority(
    authority_url: str,
    advertise_addr: str,
    timeout: float = 5.0,
    max_retries: int = 3,
    backoff: float = 2,
    client: Optional[httpx.Client] = None
) -> None:
    """
    Announce a participant to the authority, which answers by pushing its config.

    Args:
        authority_url: Base URL of the authority node
        advertise_addr: Base URL the authority should use to reach this participant

    Raises:
        TransportError: If the authority cannot be reached or refuses the registration
    """
    owns_client = client is None
    client = client or httpx.Client(timeout=timeout)
    try:
        _post_with_retry(
            client,
            f"{authority_url.rstrip('/')}{REGISTER_ENDPOINT}",
            max_retries,
            backoff,
            json={"address": advertise_addr},
        )
        logger.info(f"Registered with authority [authority={authority_url}, address={advertise_addr}]")
    finally:
        if owns_client:
            client.close()
