"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, acltree.toml only contains
overrides. A fresh project needs no file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class StrategySelection(BaseModel):
    """[strategy] section."""

    model_config = {"frozen": True}

    name: str = "path"


class DatabaseConfig(BaseModel):
    """[database] section.

    ``url`` is a SQLAlchemy URL. When unset the store uses a SQLite file at
    ``{root}/.acltree/acltree.db``.
    """

    model_config = {"frozen": True}

    url: str | None = None
    echo: bool = False


class StrategyConfig(BaseModel):
    """Validated configuration of the active strategy.

    Built by the strategy registry from the strategy's packaged
    ``config.toml`` merged with ``[strategies.<name>]`` overrides. Extra
    keys are kept so strategies can carry their own settings.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = Field(min_length=1)
    prefix: str = Field(min_length=1)
    strict_mode: StrictBool
