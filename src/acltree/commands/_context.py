"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Opens the store lazily and routes results to
stdout/stderr with the right exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from acltree.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from acltree.config.settings import AclSettings
    from acltree.infrastructure.store import Store
    from acltree.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is created on first use so ``--help``, ``--version`` and
    ``init`` never open a database.
    """

    def __init__(self, settings: AclSettings) -> None:
        self.settings = settings
        self._store: Store | None = None

        from acltree.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from acltree.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def store(self) -> Store:
        """The store instance (created lazily on first access).

        A strategy configuration error aborts the command with exit code 1.
        """
        if self._store is None:
            from acltree.domain.errors import ConfigurationError
            from acltree.infrastructure.store import Store

            try:
                self._store = Store(self.settings)
            except ConfigurationError as exc:
                from acltree.services.base import BaseService

                self.emit(BaseService._failure("open", exc))
            ctx = click.get_current_context(silent=True)
            if ctx is not None and self._store is not None:
                ctx.call_on_close(self._store.close)
        assert self._store is not None
        return self._store

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult.

        Success goes to stdout (warnings to stderr unless JSON). Failure
        goes to stderr and exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)


def parse_identifier(raw: str) -> Any:
    """Turn a CLI argument into an identifier: ``Model:key`` or an alias."""
    model, sep, key = raw.partition(":")
    if sep and model and key:
        return {"model": model, "foreign_key": key}
    return raw
