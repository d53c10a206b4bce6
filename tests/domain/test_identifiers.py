"""Tests for identifier forms and coerce_identifier."""

from __future__ import annotations

import pytest

from acltree.domain.errors import InvalidIdentifier
from acltree.domain.identifiers import (
    Alias,
    CollectionRef,
    ExternalRef,
    RecordRef,
    coerce_identifier,
)
from acltree.domain.records import DomainRecord, record_model_name
from tests.conftest import FakeRecord, User


class _Collection:
    """Stand-in for the collection base class."""


class TestCoerceIdentifier:
    def test_string_becomes_alias(self) -> None:
        assert coerce_identifier("auditors", collection_type=_Collection) == Alias("auditors")

    def test_mapping_becomes_external_ref(self) -> None:
        ident = coerce_identifier({"model": "User", "foreign_key": 42}, collection_type=_Collection)
        assert ident == ExternalRef(model="User", foreign_key="42")

    def test_collection_instance_becomes_collection_ref(self) -> None:
        obj = _Collection()
        ident = coerce_identifier(obj, collection_type=_Collection)
        assert isinstance(ident, CollectionRef)
        assert ident.collection is obj

    def test_record_becomes_record_ref(self) -> None:
        record = User(pk=3)
        ident = coerce_identifier(record, collection_type=_Collection)
        assert isinstance(ident, RecordRef)
        assert ident.record is record

    def test_tagged_form_passes_through(self) -> None:
        alias = Alias("x")
        assert coerce_identifier(alias, collection_type=_Collection) is alias

    @pytest.mark.parametrize(
        "value",
        [
            42,
            None,
            3.5,
            ["auditors"],
            {"model": "User"},
            {"foreign_key": 1},
            {"name": "x"},
        ],
    )
    def test_unsupported_shapes_rejected(self, value: object) -> None:
        with pytest.raises(InvalidIdentifier):
            coerce_identifier(value, collection_type=_Collection)

    def test_empty_alias_rejected(self) -> None:
        with pytest.raises(InvalidIdentifier):
            coerce_identifier("", collection_type=_Collection)


class TestExternalRef:
    def test_key_normalized_to_text(self) -> None:
        assert ExternalRef("User", 7) == ExternalRef("User", "7")  # type: ignore[arg-type]

    def test_missing_model_rejected(self) -> None:
        with pytest.raises(InvalidIdentifier):
            ExternalRef("", "1")


class TestDomainRecord:
    def test_fake_record_satisfies_protocol(self) -> None:
        assert isinstance(FakeRecord(), DomainRecord)

    def test_plain_object_does_not(self) -> None:
        assert not isinstance(object(), DomainRecord)

    def test_model_name_defaults_to_class(self) -> None:
        assert record_model_name(User()) == "User"

    def test_model_name_override(self) -> None:
        record = User()
        record.acl_model = "Account"  # type: ignore[attr-defined]
        assert record_model_name(record) == "Account"
