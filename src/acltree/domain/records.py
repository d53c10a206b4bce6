"""Protocol for external domain records wrapped by collections.

A collection can stand for any persisted record of the host application
(a user, a document, ...). The only things acltree needs from such a
record are a stable type name, a primary key, and whether it has been
saved yet.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DomainRecord(Protocol):
    """Structural type for a host-application record."""

    @property
    def primary_key(self) -> Any: ...

    @property
    def is_new_record(self) -> bool: ...

    def save(self) -> bool: ...


def record_model_name(record: DomainRecord) -> str:
    """Return the model name a record is registered under.

    Records may override their class name with an ``acl_model`` attribute.
    """
    name = getattr(record, "acl_model", None)
    if isinstance(name, str) and name:
        return name
    return type(record).__name__
