"""Tests for IdentifierResolver — strict and lenient resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from acltree.domain.errors import (
    InvalidIdentifier,
    PersistenceError,
    RoleMismatch,
    UnknownIdentifier,
)
from acltree.domain.identifiers import Alias, ExternalRef
from acltree.domain.types import Role
from acltree.infrastructure.store import Store
from acltree.models.collection import AccessControlCollection
from tests.conftest import FakeRecord, User, make_store


class TestLenientResolution:
    def test_alias_created_once(self, store: Store) -> None:
        first = store.resolve("auditors", Role.REQUESTOR)
        second = store.resolve("auditors", Role.REQUESTOR)
        assert first == second
        assert len(store.all_collections(Role.REQUESTOR)) == 1

    def test_external_ref_created(self, store: Store) -> None:
        c = store.resolve({"model": "User", "foreign_key": 42}, Role.REQUESTOR)
        assert (c.model, c.foreign_key, c.alias) == ("User", "42", None)
        assert store.resolve(ExternalRef("User", "42"), Role.REQUESTOR) == c

    def test_tagged_alias(self, store: Store) -> None:
        assert store.resolve(Alias("x"), Role.RESOURCE).alias == "x"

    def test_only_first_returns_lowest_id(self, store: Store) -> None:
        older = store.create_collection(Role.REQUESTOR, alias="dup")
        newer = store.create_collection(Role.REQUESTOR, alias="dup")
        assert store.resolve("dup", Role.REQUESTOR) == older
        assert store.resolve("dup", Role.REQUESTOR, only_first=False) == [older, newer]

    def test_all_matches_for_new_identifier(self, store: Store) -> None:
        found = store.resolve("fresh", Role.REQUESTOR, only_first=False)
        assert isinstance(found, list)
        assert len(found) == 1

    def test_role_by_name(self, store: Store) -> None:
        c = store.resolve("docs", "resource-collection")
        assert c.role is Role.RESOURCE
        assert store.resolve("docs", "resource-group") == c
        assert store.resolve("docs", store.registry.resolve_role("resource-collection")) == c

    def test_abstract_role_rejected(self, store: Store) -> None:
        with pytest.raises(ValueError):
            store.resolve("docs", "acl-object")


class TestStrictResolution:
    def test_unknown_alias(self, strict_store: Store) -> None:
        with pytest.raises(UnknownIdentifier):
            strict_store.resolve("ghosts", Role.REQUESTOR)
        assert strict_store.all_collections(Role.REQUESTOR) == []

    def test_unknown_external_ref(self, strict_store: Store) -> None:
        with pytest.raises(UnknownIdentifier):
            strict_store.resolve({"model": "User", "foreign_key": 1}, Role.REQUESTOR)

    def test_existing_found(self, strict_store: Store) -> None:
        c = strict_store.create_collection(Role.REQUESTOR, alias="auditors")
        assert strict_store.resolve("auditors", Role.REQUESTOR) == c

    def test_join_unknown_group(self, strict_store: Store) -> None:
        c = strict_store.create_collection(Role.REQUESTOR, alias="auditors")
        with pytest.raises(UnknownIdentifier):
            c.join("ghosts")


class TestCollectionAndRecordRefs:
    def test_collection_passes_through(self, store: Store) -> None:
        c = store.create_collection(Role.REQUESTOR, alias="x")
        assert store.resolve(c, Role.REQUESTOR) is c
        assert store.resolve(c, Role.REQUESTOR, only_first=False) == [c]

    def test_unsaved_collection_saved(self, store: Store) -> None:
        c = store.collection_type(Role.REQUESTOR)(store, alias="x")
        store.resolve(c, Role.REQUESTOR)
        assert not c.is_new_record

    def test_wrong_role(self, store: Store) -> None:
        resource = store.create_collection(Role.RESOURCE, alias="docs")
        with pytest.raises(RoleMismatch):
            store.resolve(resource, Role.REQUESTOR)

    def test_other_strategy(self, store: Store, strategy_name: str, tmp_path: Path) -> None:
        other_name = "adjacency" if strategy_name == "path" else "path"
        other = make_store(tmp_path / "other", other_name)
        try:
            foreign = other.create_collection(Role.REQUESTOR, alias="x")
            with pytest.raises(RoleMismatch):
                store.resolve(foreign, Role.REQUESTOR)
        finally:
            other.close()

    def test_other_store(self, store: Store, strategy_name: str, tmp_path: Path) -> None:
        other = make_store(tmp_path / "other", strategy_name)
        try:
            foreign = other.create_collection(Role.REQUESTOR, alias="x")
            with pytest.raises(RoleMismatch):
                store.resolve(foreign, Role.REQUESTOR)
        finally:
            other.close()

    def test_record_saved_then_resolved(self, store: Store) -> None:
        user = User()
        c = store.resolve(user, Role.REQUESTOR)
        assert user.saves == 1
        assert (c.model, c.foreign_key) == ("User", str(user.pk))
        assert store.resolve(user, Role.REQUESTOR) == c
        assert user.saves == 1

    def test_record_model_override(self, store: Store) -> None:
        user = User(pk=3)
        user.acl_model = "Account"  # type: ignore[attr-defined]
        assert store.resolve(user, Role.REQUESTOR).model == "Account"

    def test_record_save_failure(self, store: Store) -> None:
        with pytest.raises(PersistenceError):
            store.resolve(FakeRecord(fail_save=True), Role.REQUESTOR)
        assert store.all_collections(Role.REQUESTOR) == []

    def test_base_class_instance_is_collection_ref(self, store: Store) -> None:
        c = store.create_collection(Role.RESOURCE, alias="docs")
        assert isinstance(c, AccessControlCollection)
        assert store.resolve(c, "resource-group") is c


class TestInvalidIdentifiers:
    @pytest.mark.parametrize("value", [42, None, 1.5, ["a"], {"model": "User"}, ""])
    def test_rejected(self, store: Store, value: object) -> None:
        with pytest.raises(InvalidIdentifier):
            store.resolve(value, Role.REQUESTOR)
