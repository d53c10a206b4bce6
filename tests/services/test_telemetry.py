"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

import time
from collections.abc import Generator

import pytest

from acltree.infrastructure.store import Store
from acltree.services.membership import MembershipService
from acltree.services.result import ServiceResult
from acltree.services.telemetry import (
    Span,
    _current_span,
    disable_telemetry,
    enable_telemetry,
    trace_span,
    traced,
)


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    yield
    disable_telemetry()
    _current_span.set(None)


class TestSpan:
    def test_duration_before_end_is_zero(self) -> None:
        assert Span(name="test").duration_ms == 0.0

    def test_duration_after_end(self) -> None:
        span = Span(name="test")
        time.sleep(0.002)
        span.end()
        assert span.duration_ms > 0

    def test_to_dict(self) -> None:
        span = Span(name="root")
        span.annotate("nodes", 2)
        span.children.append(Span(name="child"))
        span.end()
        d = span.to_dict()
        assert d["name"] == "root"
        assert d["annotations"] == {"nodes": 2}
        assert d["children"][0]["name"] == "child"


class TestTraceSpan:
    def test_disabled_yields_none(self) -> None:
        with trace_span("x") as span:
            assert span is None

    def test_no_parent_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("x") as span:
            assert span is None


class _Service:
    @traced
    def run(self) -> ServiceResult:
        with trace_span("inner") as span:
            if span:
                span.annotate("k", "v")
        return ServiceResult(ok=True, op="run")

    @traced
    def plain(self) -> int:
        return 7


class TestTraced:
    def test_disabled_no_meta(self) -> None:
        assert _Service().run().meta is None

    def test_enabled_injects_span_tree(self) -> None:
        enable_telemetry()
        result = _Service().run()
        assert result.meta is not None
        telemetry = result.meta["telemetry"]
        assert telemetry["name"] == "_Service.run"
        assert telemetry["children"][0]["name"] == "inner"
        assert telemetry["children"][0]["annotations"] == {"k": "v"}

    def test_non_result_passthrough(self) -> None:
        enable_telemetry()
        assert _Service().plain() == 7

    def test_service_join(self, store: Store) -> None:
        enable_telemetry()
        result = MembershipService(store).join("requestor", "managers", "employees")
        spans = [c["name"] for c in result.meta["telemetry"]["children"]]  # type: ignore[index]
        assert spans == ["resolve", "join"]
