"""Internal routes for node-to-node config replication."""

from fastapi import APIRouter, Depends, Request

from common.exceptions import RoleViolationError
from common.logging_config import get_logger
from sync_node.replication.replicator import ConfigReplicator
from sync_node.replication.transport import Transport
from sync_node.routes.dependencies import get_replicator, get_transport
from sync_node.schemas import (
    ErrorResponse,
    ReceiveConfigResponse,
    RegisterParticipantRequest,
    RegisterParticipantResponse
)

logger = get_logger(__name__)

router = APIRouter(prefix="/internal", tags=["internal"])


@router.post(
    "/config",
    response_model=ReceiveConfigResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}
)
async def receive_config(request: Request, replicator: ConfigReplicator = Depends(get_replicator)):
    """
    Accept a raw config payload from the authority.

    Runs on the event loop, so payloads are applied one at a time in arrival order.
    """
    payload = await request.body()
    replicator.receive_server_config(payload)
    return ReceiveConfigResponse(accepted=True, size=len(payload))


@router.post(
    "/participants/register",
    response_model=RegisterParticipantResponse,
    responses={409: {"model": ErrorResponse}}
)
def register_participant(
    peer_info: RegisterParticipantRequest,
    replicator: ConfigReplicator = Depends(get_replicator),
    transport: Transport = Depends(get_transport)
):
    """
    Register a participant with the authority and push the current config to it.
    """
    if not replicator.is_authority or transport is None:
        raise RoleViolationError("Participants can only register with the authority")

    newly_registered = transport.register(peer_info.address)
    replicator.sync_participant(peer_info.address.rstrip('/'))

    return RegisterParticipantResponse(
        address=peer_info.address,
        newly_registered=newly_registered
    )
