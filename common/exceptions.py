"""Custom exception classes shared by every node component."""


class PortalSyncException(Exception):
    """
    Base exception class for all config sync errors.
    """
    pass


class ProtocolError(PortalSyncException):
    """
    Raised when the authority and a participant disagree on the wire format.
    """
    pass


class PayloadDecodeError(ProtocolError):
    """
    Raised when a config payload is truncated, oversized or holds a non-boolean byte.
    """
    pass


class StoreError(PortalSyncException):
    """
    Base class for backing store failures.
    """
    pass


class SettingTypeError(StoreError):
    """
    Raised when a stored value does not match the type of the setting's default.
    """
    pass


class UnknownSettingError(StoreError):
    """
    Raised when addressing a section/key that was never bound.
    """
    pass


class ConfigFileError(StoreError):
    """
    Raised when the backing config file cannot be read or parsed.
    """
    pass


class RoleViolationError(PortalSyncException):
    """
    Raised when an operation is invoked on a node whose role forbids it.
    """
    pass


class TransportError(PortalSyncException):
    """
    Raised when a payload cannot be delivered to a participant.
    """
    pass
