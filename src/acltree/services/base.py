"""BaseService — foundation for acltree services.

Every service receives a :class:`Store`. Services own their transaction
boundaries via ``self._store.transaction()``, which makes each service
call atomic.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from acltree.domain.errors import (
    AclError,
    ConfigurationError,
    CycleError,
    InvalidIdentifier,
    PersistenceError,
    RoleMismatch,
    UnknownIdentifier,
)
from acltree.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from acltree.infrastructure.store import Store

logger = logging.getLogger(__name__)

# Most specific first: RoleMismatch is an InvalidIdentifier.
ERROR_CODES: tuple[tuple[type[AclError], str], ...] = (
    (ConfigurationError, "CONFIGURATION_ERROR"),
    (UnknownIdentifier, "UNKNOWN_IDENTIFIER"),
    (RoleMismatch, "ROLE_MISMATCH"),
    (InvalidIdentifier, "INVALID_IDENTIFIER"),
    (PersistenceError, "PERSISTENCE_ERROR"),
    (CycleError, "CYCLE"),
)


def error_code(exc: AclError) -> str:
    for exc_type, code in ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    return "ACL_ERROR"


class BaseService:
    """Base for service-layer classes.

    Usage::

        class MembershipService(BaseService):
            def join(self, ...) -> ServiceResult:
                with self._store.transaction():
                    ...
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    @staticmethod
    def _failure(op: str, exc: AclError, **detail: Any) -> ServiceResult:
        """Convert a domain exception into a failed ServiceResult."""
        logger.debug("%s failed: %s", op, exc)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=error_code(exc), message=str(exc), detail=detail),
        )
