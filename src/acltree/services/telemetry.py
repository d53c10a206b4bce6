"""Span timing for service calls.

Off by default. ``--verbose`` turns it on for the CLI invocation; each
``@traced`` service call then records a tree of spans (one per
``trace_span`` block) and returns it under ``ServiceResult.meta["telemetry"]``.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from acltree.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("acltree_telemetry", default=False)
_current_span: ContextVar[Span | None] = ContextVar("acltree_span", default=None)

_log = structlog.get_logger("acltree.telemetry")


@dataclass
class Span:
    name: str
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    started_ns: int = field(default_factory=time.perf_counter_ns)
    elapsed_ns: int | None = None

    @property
    def duration_ms(self) -> float:
        return 0.0 if self.elapsed_ns is None else self.elapsed_ns / 1_000_000

    def end(self) -> None:
        self.elapsed_ns = time.perf_counter_ns() - self.started_ns

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.children:
            out["children"] = [child.to_dict() for child in self.children]
        return out


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.end()
        _current_span.reset(token)


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Time a block as a child of the running service span.

    Yields None outside a traced call or while telemetry is off.
    """
    parent = _current_span.get()
    if parent is None or not _enabled.get():
        yield None
        return
    span = Span(name)
    parent.children.append(span)
    with _activate(span):
        yield span


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Record a root span around a service method.

    Non-ServiceResult return values pass through untouched.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        with _activate(Span(func.__qualname__)) as span:
            result = func(*args, **kwargs)

        if not isinstance(result, ServiceResult):
            return result
        _log.debug("service.traced", op=result.op, ok=result.ok, duration_ms=span.duration_ms)
        meta = dict(result.meta or {})
        meta["telemetry"] = span.to_dict()
        return result.model_copy(update={"meta": meta})  # type: ignore[return-value]

    return wrapper


def enable_telemetry() -> None:
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
