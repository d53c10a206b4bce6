"""Domain exceptions.

All of them propagate to the immediate caller. The service layer is the
only place they are converted into structured error payloads.
"""


class AclError(Exception):
    """Base exception for acltree."""


class ConfigurationError(AclError):
    """Strategy configuration is missing or malformed. Fatal at startup."""


class UnknownIdentifier(AclError):
    """Strict-mode lookup found no matching collection."""


class InvalidIdentifier(AclError):
    """Identifier shape or collection attributes are not supported."""


class RoleMismatch(InvalidIdentifier):
    """Participants belong to different roles or different strategies."""


class PersistenceError(AclError):
    """A required save was rejected by the storage engine."""


class CycleError(AclError):
    """A join would make a collection its own ancestor."""
