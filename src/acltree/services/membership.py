"""MembershipService — join, leave and is-member checks."""

from __future__ import annotations

from typing import Any

from acltree.domain.errors import AclError
from acltree.domain.types import Role
from acltree.services.base import BaseService
from acltree.services.result import ServiceResult
from acltree.services.telemetry import trace_span, traced


class MembershipService(BaseService):
    """Membership operations between collections of one role."""

    @traced
    def join(self, role: Role | str, member: Any, group: Any) -> ServiceResult:
        """Make *member* a direct member of *group*."""
        try:
            with self._store.transaction():
                with trace_span("resolve"):
                    child = self._store.resolve(member, role)
                    parent = self._store.resolve(group, role)
                with trace_span("join") as span:
                    child.join(parent)
                    if span:
                        span.annotate("nodes", len(child.get_nodes()))
                data = {
                    "member": child.to_dict(),
                    "group": parent.to_dict(),
                    "positions": child.fetch_comprised_positions(),
                }
        except AclError as exc:
            return self._failure("join", exc, member=str(member), group=str(group))
        return ServiceResult(ok=True, op="join", data=data)

    @traced
    def leave(self, role: Role | str, member: Any, group: Any) -> ServiceResult:
        """Remove the direct membership of *member* in *group* (no-op if absent)."""
        try:
            with self._store.transaction():
                child = self._store.resolve(member, role)
                parent = self._store.resolve(group, role)
                was_member = parent in child.get_parent_objects()
                child.leave(parent)
                data = {
                    "member": child.to_dict(),
                    "group": parent.to_dict(),
                    "changed": was_member,
                }
        except AclError as exc:
            return self._failure("leave", exc, member=str(member), group=str(group))

        warnings = [] if was_member else [f"{child.label!r} was not a member of {parent.label!r}"]
        return ServiceResult(ok=True, op="leave", data=data, warnings=warnings)

    @traced
    def check(self, role: Role | str, member: Any, group: Any) -> ServiceResult:
        """Whether *member* is *group* or lies anywhere below it."""
        try:
            with self._store.transaction():
                child = self._store.resolve(member, role)
                parent = self._store.resolve(group, role)
                result = child.is_(parent)
        except AclError as exc:
            return self._failure("is", exc, member=str(member), group=str(group))
        return ServiceResult(
            ok=True,
            op="is",
            data={"member": child.label, "group": parent.label, "result": result},
        )
