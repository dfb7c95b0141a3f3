"""Wire format for the authority's config broadcast.

The payload is positional: one byte per shared setting, written and read in
SHARED_FIELDS order, with no names, length prefix or version tag. Adding or
removing a shared field breaks compatibility with every deployed node.
"""

import dataclasses
from typing import Tuple

from common.constants import BOOL_FIELD_SIZE
from common.exceptions import PayloadDecodeError
from common.types import ConfigSettings

SHARED_FIELDS: Tuple[str, ...] = (
    "ping_map_disabled",
    "double_portal_costs",
)

PAYLOAD_SIZE: int = len(SHARED_FIELDS) * BOOL_FIELD_SIZE

_TRUE = 0x01
_FALSE = 0x00


def encode_config(settings: ConfigSettings) -> bytes:
    """
    Serialize the shared subset of a snapshot.

    Args:
        settings: Snapshot to encode (normally the authority's Local view)

    Returns:
        PAYLOAD_SIZE bytes, one 0x00/0x01 byte per shared field
    """
    return bytes(
        _TRUE if getattr(settings, name) else _FALSE
        for name in SHARED_FIELDS
    )


def decode_config(payload: bytes, base: ConfigSettings) -> ConfigSettings:
    """
    Deserialize a payload on top of an existing snapshot.

    Fields that are not shared keep the value they have in base. Nothing is
    returned unless every field decodes, so callers never see partial state.

    Args:
        payload: Raw bytes received from the authority
        base: Snapshot providing values for non-shared fields

    Returns:
        New ConfigSettings with the shared fields replaced

    Raises:
        PayloadDecodeError: If the payload has the wrong length or a byte is not 0x00/0x01
    """
    data = bytes(payload)

    if len(data) < PAYLOAD_SIZE:
        raise PayloadDecodeError(
            f"Config payload truncated: expected {PAYLOAD_SIZE} bytes, got {len(data)}"
        )
    if len(data) > PAYLOAD_SIZE:
        raise PayloadDecodeError(
            f"Config payload oversized: expected {PAYLOAD_SIZE} bytes, got {len(data)}"
        )

    values = {}
    for position, name in enumerate(SHARED_FIELDS):
        raw = data[position]
        if raw not in (_TRUE, _FALSE):
            raise PayloadDecodeError(
                f"Invalid boolean byte 0x{raw:02x} for field '{name}' at offset {position}"
            )
        values[name] = raw == _TRUE

    return dataclasses.replace(base, **values)
