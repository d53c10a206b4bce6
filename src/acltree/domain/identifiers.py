"""Identifier forms accepted wherever a collection is expected.

Callers may reference a collection by alias, by the external record it
wraps, by the collection itself, or by the live record. Loose inputs are
normalized into one of four tagged forms by :func:`coerce_identifier`,
and the resolver dispatches on the form.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from acltree.domain.errors import InvalidIdentifier
from acltree.domain.records import DomainRecord


@dataclass(frozen=True)
class Alias:
    """Human-readable collection name, e.g. ``"auditors"``."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidIdentifier("Alias must be a non-empty string")


@dataclass(frozen=True)
class ExternalRef:
    """``(model, foreign_key)`` pair naming an external record."""

    model: str
    foreign_key: str

    def __post_init__(self) -> None:
        if not self.model:
            raise InvalidIdentifier("External reference needs a model name")
        if self.foreign_key is None:
            raise InvalidIdentifier("External reference needs a foreign key")
        # Keys are stored as text; 42 and "42" name the same record.
        object.__setattr__(self, "foreign_key", str(self.foreign_key))


@dataclass(frozen=True)
class CollectionRef:
    """A collection instance passed directly."""

    collection: Any


@dataclass(frozen=True)
class RecordRef:
    """A live domain record; resolved through its model name and key."""

    record: DomainRecord


type Identifier = Alias | ExternalRef | CollectionRef | RecordRef


def coerce_identifier(value: Any, *, collection_type: type) -> Identifier:
    """Normalize *value* into one of the four identifier forms.

    Args:
        value: Caller-supplied reference.
        collection_type: Base class of collections, used to recognise
            direct collection references.

    Raises:
        InvalidIdentifier: If *value* matches none of the supported shapes.
    """
    if isinstance(value, (Alias, ExternalRef, CollectionRef, RecordRef)):
        return value
    if isinstance(value, collection_type):
        return CollectionRef(value)
    if isinstance(value, str):
        return Alias(value)
    if isinstance(value, Mapping):
        if value.get("model") is not None and value.get("foreign_key") is not None:
            return ExternalRef(model=str(value["model"]), foreign_key=value["foreign_key"])
        msg = f"Mapping identifiers need 'model' and 'foreign_key', got keys {sorted(map(str, value))}"
        raise InvalidIdentifier(msg)
    if isinstance(value, DomainRecord):
        return RecordRef(value)
    msg = f"Unknown ACL collection identifier: {value!r}"
    raise InvalidIdentifier(msg)
