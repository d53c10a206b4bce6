"""StrategyRegistry — binds logical role names to the active strategy.

Every component refers to roles abstractly (``resource-collection``,
``node``); the registry prefixes them with the active strategy's prefix
and hands back the concrete classes. The registry is constructed
explicitly, owned by the store, and initialized at most once.

INVARIANT: initialization runs one configuration load even under
concurrent first calls, and a failed initialization is never retried.
"""

from __future__ import annotations

import logging
import threading
import tomllib
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from acltree.config.models import StrategyConfig
from acltree.domain.errors import ConfigurationError
from acltree.domain.types import (
    ACL_OBJECT,
    GLOBAL_ROLES,
    REQUESTOR_GROUP,
    RESOURCE_GROUP,
    STRATEGY_ROLES,
    Role,
)

if TYPE_CHECKING:
    from acltree.config.settings import AclSettings
    from acltree.strategies.base import Strategy
    from acltree.strategies.manager import StrategyManager

logger = logging.getLogger(__name__)


class StrategyRegistry:
    """Init-once holder of the active strategy and its configuration."""

    def __init__(
        self,
        name: str = "path",
        overrides: Mapping[str, Any] | None = None,
        *,
        manager: StrategyManager | None = None,
    ) -> None:
        self._name = name
        self._overrides = dict(overrides or {})
        self._manager = manager
        self._lock = threading.Lock()
        self._initialized = False
        self._error: ConfigurationError | None = None
        self._config: StrategyConfig | None = None
        self._strategy: Strategy | None = None
        self._types: dict[str, type] = {}

    @classmethod
    def from_settings(
        cls, settings: AclSettings, *, manager: StrategyManager | None = None
    ) -> StrategyRegistry:
        name = settings.strategy.name
        return cls(name, settings.strategy_overrides(name), manager=manager)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Load the strategy and its configuration on first call.

        Raises:
            ConfigurationError: Unknown strategy, or configuration missing
                or malformed. Re-raised on every later call.
        """
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            if self._error is not None:
                raise self._error
            try:
                self._setup()
            except ConfigurationError as exc:
                self._error = exc
                raise
            self._initialized = True
        logger.debug("Strategy %s initialized (prefix %s)", self._name, self.prefix)

    def close(self) -> None:
        """Drop the loaded configuration and bindings."""
        with self._lock:
            self._initialized = False
            self._error = None
            self._config = None
            self._strategy = None
            self._types = {}

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _setup(self) -> None:
        strategy_cls = self._get_manager().get(self._name)
        if strategy_cls is None:
            msg = f"Unknown strategy {self._name!r}"
            raise ConfigurationError(msg)

        config = self._load_config(strategy_cls)
        strategy = strategy_cls(config)

        types = strategy.role_types()
        missing = STRATEGY_ROLES - types.keys()
        if missing:
            msg = f"Strategy {self._name!r} does not bind roles {sorted(missing)}"
            raise ConfigurationError(msg)

        self._config = config
        self._strategy = strategy
        self._types = {f"{config.prefix}{role}": cls for role, cls in types.items()}

    def _load_config(self, strategy_cls: type[Strategy]) -> StrategyConfig:
        """Read the packaged config, apply overrides, validate."""
        try:
            data = strategy_cls.default_config()
        except FileNotFoundError as exc:
            msg = f"Unable to load configuration for strategy {self._name!r}"
            raise ConfigurationError(msg) from exc
        except tomllib.TOMLDecodeError as exc:
            msg = f"Malformed configuration for strategy {self._name!r}: {exc}"
            raise ConfigurationError(msg) from exc

        data.update(self._overrides)
        data["name"] = self._name
        try:
            return StrategyConfig.model_validate(data)
        except ValidationError as exc:
            msg = f"Invalid configuration for strategy {self._name!r}: {exc}"
            raise ConfigurationError(msg) from exc

    def _get_manager(self) -> StrategyManager:
        if self._manager is None:
            from acltree.strategies.manager import StrategyManager

            self._manager = StrategyManager()
        return self._manager

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def strategy(self) -> Strategy:
        self.initialize()
        assert self._strategy is not None
        return self._strategy

    @property
    def settings(self) -> StrategyConfig:
        self.initialize()
        assert self._config is not None
        return self._config

    @property
    def prefix(self) -> str:
        return self.settings.prefix

    @property
    def strict_mode(self) -> bool:
        return self.settings.strict_mode

    def config(self, key: str, default: Any = None) -> Any:
        """Return configuration value *key*, or *default* when absent."""
        data = self.settings.model_dump()
        return data.get(key, default)

    def resolve_role(self, role_name: str) -> str:
        """Qualify *role_name* with the active strategy's prefix.

        Reserved names and names already carrying the prefix are returned
        unchanged, so the mapping is idempotent.
        """
        if role_name in GLOBAL_ROLES:
            return role_name
        prefix = self.prefix
        if role_name.startswith(prefix):
            return role_name
        return f"{prefix}{role_name}"

    def resolve_type(self, role_name: str) -> type:
        """Return the concrete class bound to *role_name*.

        Raises:
            ValueError: If the active strategy binds nothing to the name.
        """
        qualified = self.resolve_role(role_name)
        if qualified == ACL_OBJECT:
            from acltree.models.collection import AccessControlCollection

            return AccessControlCollection
        if qualified == RESOURCE_GROUP:
            return self.resolve_type(Role.RESOURCE.collection_role)
        if qualified == REQUESTOR_GROUP:
            return self.resolve_type(Role.REQUESTOR.collection_role)
        try:
            return self._types[qualified]
        except KeyError:
            msg = f"Unknown role {role_name!r} for strategy {self._name!r}"
            raise ValueError(msg) from None

    def collection_type(self, role: Role | str) -> type:
        """Concrete collection class for ``resource`` or ``requestor``."""
        return self.resolve_type(Role(role).collection_role)

    @property
    def resource_group(self) -> type:
        """Shortcut to the concrete resource collection class."""
        return self.resolve_type(RESOURCE_GROUP)

    @property
    def requestor_group(self) -> type:
        """Shortcut to the concrete requestor collection class."""
        return self.resolve_type(REQUESTOR_GROUP)

    @property
    def node_type(self) -> type:
        return self.resolve_type("node")
