"""AclNode — one position of a collection inside the hierarchy.

Nodes are read-only snapshots of a row. The parent link is a key, not a
reference: walking the graph always goes back to the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from acltree.domain.types import Role

if TYPE_CHECKING:
    from sqlalchemy import Row


@dataclass(frozen=True)
class AclNode:
    """A node row of either role.

    The base class serves strategies whose position is the node id itself.
    """

    id: int
    collection_id: int
    parent_id: int | None
    role: Role

    @property
    def is_free(self) -> bool:
        """A node without parent roots its own subtree."""
        return self.parent_id is None

    @property
    def position(self) -> Any:
        """Strategy-specific marker consumed by the position check."""
        return self.id

    @classmethod
    def from_row(cls, row: Row[Any], role: Role) -> AclNode:
        return cls(
            id=row.id,
            collection_id=row.collection_id,
            parent_id=row.parent_id,
            role=role,
        )
