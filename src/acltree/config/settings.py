"""AclSettings — one frozen object for CLI flags, env vars and ``acltree.toml``.

Sources, highest priority first: keyword arguments (CLI flags or library
callers), ``ACLTREE_*`` environment variables (``__`` separates nested
keys, e.g. ``ACLTREE_STRATEGY__NAME``), the TOML file, field defaults.
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from acltree.config.discovery import find_config
from acltree.config.models import DatabaseConfig, StrategySelection
from acltree.domain.errors import ConfigurationError

# Sources are chosen at class level; the file for this construction rides along here.
_toml_file: ContextVar[Path | None] = ContextVar("acltree_toml_file", default=None)


class AclSettings(BaseSettings):
    """Settings for a store and the CLI around it.

    Attributes:
        root: Project directory (parent of ``acltree.toml``, or CWD).
        config_path: The TOML file in use, or None.
        strategies: Raw per-strategy overrides. Validated by the strategy
            registry, not here, so a malformed section fails at registry
            initialization with a ConfigurationError.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_prefix="ACLTREE_",
        env_nested_delimiter="__",
    )

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    strategy: StrategySelection = Field(default_factory=StrategySelection)
    strategies: dict[str, dict[str, Any]] = Field(default_factory=dict)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        toml_file = _toml_file.get()
        if toml_file is not None:
            sources.append(TomlConfigSettingsSource(settings_cls, toml_file=toml_file))
        return tuple(sources)

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL of the backing database."""
        if self.database.url:
            return self.database.url
        return f"sqlite:///{self.root / '.acltree' / 'acltree.db'}"

    def strategy_overrides(self, name: str) -> dict[str, Any]:
        """Raw ``[strategies.<name>]`` table, empty when absent."""
        return dict(self.strategies.get(name, {}))

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        strategy_name: str | None = None,
        **cli_flags: Any,
    ) -> AclSettings:
        """Build settings for a CLI invocation or a library caller.

        Without *config_path* the TOML file is found by walking up from
        *root* (or the CWD); *root* then defaults to the file's directory.

        Raises:
            ConfigurationError: The TOML file cannot be parsed.
        """
        if config_path:
            candidate = Path(config_path)
            toml_path = candidate if candidate.is_file() else None
        else:
            toml_path = find_config(root)

        if root is None:
            root = toml_path.parent if toml_path is not None else Path.cwd()
        if strategy_name:
            cli_flags["strategy"] = StrategySelection(name=strategy_name)

        token = _toml_file.set(toml_path)
        try:
            return cls(root=root, config_path=toml_path, **cli_flags)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {toml_path}: {exc}"
            raise ConfigurationError(msg) from exc
        finally:
            _toml_file.reset(token)
