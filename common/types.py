"""Shared data type definitions (ConfigSettings, Role, SettingDefinition)."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Role(Enum):
    """
    Replication role of a process, fixed at construction.
    """
    AUTHORITY = "authority"
    PARTICIPANT = "participant"

    @classmethod
    def from_flag(cls, is_authority: bool) -> "Role":
        return cls.AUTHORITY if is_authority else cls.PARTICIPANT


@dataclass(frozen=True)
class ConfigSettings:
    """
    Snapshot of the tracked settings at a point in time.

    Used both as the Local view (resolved from the backing store) and the
    Server view (mirrored from the authority).
    """
    ping_map_disabled: bool = False
    display_portal_colour: bool = False
    double_portal_costs: bool = False


@dataclass(frozen=True)
class SettingDefinition:
    """
    A named setting bound against the backing store.

    Attributes:
        section: Section the key lives under (e.g., 'General')
        key: Setting name as persisted
        default: Default value; its type is the expected type of the setting
        description: Human readable explanation shown to operators
        field: ConfigSettings attribute the value maps to, or None if untracked
    """
    section: str
    key: str
    default: Any
    description: str
    field: Optional[str] = None
