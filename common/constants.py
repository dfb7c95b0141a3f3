"""Project-wide constants (setting names, sections, wire sizes)."""

GENERAL_SECTION: str = "General"

PING_MAP_DISABLED: str = "PingMapDisabled"
DISPLAY_PORTAL_COLOUR: str = "DisplayPortalColour"
DOUBLE_PORTAL_COSTS: str = "DoublePortalCosts"
NEXUS_ID: str = "NexusID"

NEXUS_MOD_ID: int = 102  # nexusmods.com/valheim/mods/102

BOOL_FIELD_SIZE: int = 1  # one byte per boolean on the wire

DEFAULT_NODE_PORT: int = 8100
