"""InitService — create acltree.toml and the database for a new project."""

from __future__ import annotations

from pathlib import Path

from acltree.config.discovery import CONFIG_FILENAME
from acltree.config.settings import AclSettings
from acltree.domain.errors import AclError
from acltree.services.base import BaseService
from acltree.services.result import ServiceError, ServiceResult
from acltree.services.telemetry import traced

_CONFIG_TEMPLATE = """\
[strategy]
name = "{strategy}"

# Per-strategy overrides, merged over the strategy's packaged defaults:
# [strategies.{strategy}]
# strict_mode = true
"""


class InitService:
    """Project bootstrap. Has no store until the project exists."""

    @staticmethod
    @traced
    def init_project(path: Path, *, strategy: str = "path", force: bool = False) -> ServiceResult:
        """Write ``acltree.toml`` under *path* and create the tables."""
        from acltree.infrastructure.store import Store

        config_file = path / CONFIG_FILENAME
        if config_file.exists() and not force:
            return ServiceResult(
                ok=False,
                op="init",
                error=ServiceError(
                    code="ALREADY_INITIALIZED", message=f"{config_file} already exists"
                ),
            )

        path.mkdir(parents=True, exist_ok=True)
        config_file.write_text(_CONFIG_TEMPLATE.format(strategy=strategy), encoding="utf-8")

        try:
            settings = AclSettings.from_cli(config_path=str(config_file), root=path)
            with Store(settings) as store:
                data = {
                    "path": str(path),
                    "config": str(config_file),
                    "strategy": store.registry.name,
                    "prefix": store.registry.prefix,
                    "strict_mode": store.registry.strict_mode,
                    "database": settings.database_url,
                }
        except AclError as exc:
            config_file.unlink(missing_ok=True)
            return BaseService._failure("init", exc, path=str(path))
        return ServiceResult(ok=True, op="init", data=data)
