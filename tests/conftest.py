"""Shared pytest fixtures and test helpers for acltree tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from acltree.config.settings import AclSettings
from acltree.infrastructure.store import Store

STRATEGIES = ("path", "adjacency")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host ACLTREE_* variables out of every test."""
    for key in list(os.environ):
        if key.startswith("ACLTREE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _restore_global_state() -> Generator[None]:
    """Undo what a CLI invocation configures: log handlers and telemetry."""
    from acltree.services.telemetry import disable_telemetry

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    acl = logging.getLogger("acltree")
    acl_level = acl.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    acl.setLevel(acl_level)
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


def make_store(root: Path, strategy: str = "path", **overrides: Any) -> Store:
    """Open a store on a fresh SQLite file under *root*."""
    strategies = {strategy: overrides} if overrides else {}
    settings = AclSettings.from_cli(root=root, strategy_name=strategy, strategies=strategies)
    return Store(settings)


@pytest.fixture(params=STRATEGIES)
def strategy_name(request: pytest.FixtureRequest) -> str:
    return request.param


@pytest.fixture
def store(tmp_path: Path, strategy_name: str) -> Generator[Store]:
    """Lenient store, once per built-in strategy."""
    s = make_store(tmp_path, strategy_name)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def strict_store(tmp_path: Path, strategy_name: str) -> Generator[Store]:
    """Store whose resolver never creates collections."""
    s = make_store(tmp_path, strategy_name, strict_mode=True)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI opens an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_project")``.
    """
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


@dataclass
class FakeRecord:
    """Minimal host-application record satisfying DomainRecord."""

    pk: int | None = None
    saves: int = 0
    fail_save: bool = False
    _next_pk: list[int] = field(default_factory=lambda: [100])

    @property
    def primary_key(self) -> int | None:
        return self.pk

    @property
    def is_new_record(self) -> bool:
        return self.pk is None

    def save(self) -> bool:
        if self.fail_save:
            return False
        self.saves += 1
        if self.pk is None:
            self.pk = self._next_pk[0]
            self._next_pk[0] += 1
        return True


class User(FakeRecord):
    """Record whose model name is its class name."""


def requestors(store: Store, *aliases: str) -> list[Any]:
    """Resolve (and create) requestor collections by alias."""
    return [store.resolve(alias, "requestor") for alias in aliases]
