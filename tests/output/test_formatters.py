"""Tests for output formatting (JSON, quiet, Rich)."""

from __future__ import annotations

import json

from acltree.output.formatters import OutputSettings, format_result
from acltree.services.result import ServiceError, ServiceResult

_TREE = ServiceResult(
    ok=True,
    op="tree",
    data={
        "role": "requestor",
        "count": 3,
        "items": [
            {
                "id": 1,
                "label": "employees",
                "children": [{"id": 2, "label": "managers", "children": []}],
            },
            {"id": 3, "label": "auditors", "children": []},
        ],
    },
)


class TestJson:
    def test_full_payload(self) -> None:
        result = ServiceResult(ok=True, op="is", data={"result": True})
        parsed = json.loads(format_result(result, settings=OutputSettings(json_output=True)))
        assert parsed["data"]["result"] is True

    def test_json_beats_quiet(self) -> None:
        result = ServiceResult(ok=True, op="is", data={"result": True})
        out = format_result(result, settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(out)["op"] == "is"


class TestQuiet:
    def test_is_answer(self) -> None:
        quiet = OutputSettings(quiet=True)
        yes = ServiceResult(ok=True, op="is", data={"result": True})
        no = ServiceResult(ok=True, op="is", data={"result": False})
        assert format_result(yes, settings=quiet) == "true"
        assert format_result(no, settings=quiet) == "false"

    def test_tree_flattened(self) -> None:
        out = format_result(_TREE, settings=OutputSettings(quiet=True))
        assert out.splitlines() == ["employees", "managers", "auditors"]

    def test_error(self) -> None:
        result = ServiceResult(
            ok=False, op="join", error=ServiceError(code="CYCLE", message="loop")
        )
        assert format_result(result, settings=OutputSettings(quiet=True)) == "ERROR: join: loop"


class TestRich:
    def test_tree(self) -> None:
        out = format_result(_TREE)
        assert "requestor collections" in out
        assert "managers" in out
        assert "3 collections" in out

    def test_is(self) -> None:
        result = ServiceResult(
            ok=True, op="is", data={"member": "bob", "group": "staff", "result": False}
        )
        assert "bob is not within staff" in format_result(result)

    def test_membership(self) -> None:
        result = ServiceResult(
            ok=True,
            op="join",
            data={
                "member": {"id": 1, "alias": "managers"},
                "group": {"id": 2, "alias": None, "model": "Team", "foreign_key": "4"},
                "positions": ["/2/1/"],
            },
        )
        out = format_result(result)
        assert "OK" in out
        assert "managers" in out
        assert "Team:4" in out

    def test_error_with_code(self) -> None:
        result = ServiceResult(
            ok=False,
            op="join",
            error=ServiceError(code="ROLE_MISMATCH", message="wrong", detail={"member": "a"}),
        )
        out = format_result(result, settings=OutputSettings(verbose=True))
        assert "ROLE_MISMATCH" in out
        assert "member: a" in out

    def test_verbose_telemetry(self) -> None:
        result = ServiceResult(
            ok=True,
            op="create",
            data={"id": 1, "role": "resource", "alias": "docs"},
            meta={"telemetry": {"name": "CollectionService.create", "duration_ms": 1.5}},
        )
        out = format_result(result, settings=OutputSettings(verbose=True))
        assert "CollectionService.create" in out
        assert "docs" in out

    def test_unknown_op_generic(self) -> None:
        result = ServiceResult(ok=True, op="init", data={"strategy": "path"})
        out = format_result(result)
        assert "strategy: path" in out
