"""Pydantic schemas for node-to-node endpoints."""

from pydantic import BaseModel


class RegisterParticipantRequest(BaseModel):
    """Request model for a participant announcing itself to the authority."""
    address: str


class RegisterParticipantResponse(BaseModel):
    """Response model for participant registration."""
    address: str
    newly_registered: bool


class ReceiveConfigResponse(BaseModel):
    """Response model for an accepted config payload."""
    accepted: bool
    size: int
