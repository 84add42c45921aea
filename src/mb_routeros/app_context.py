"""Application context shared across CLI commands."""

from dataclasses import dataclass

import typer

from mb_routeros.config import Config
from mb_routeros.output import Output
from mb_routeros.session import Session


@dataclass(frozen=True, slots=True)
class AppContext:
    """Shared application state passed through Typer context."""

    out: Output
    cfg: Config

    def open_session(self) -> Session:
        """Create a session for the configured appliance, exiting if no address is set."""
        if not self.cfg.address:
            self.out.print_error_and_exit("no_address", "Appliance address is not set (use --address or config.toml).")
        return Session(self.cfg)


def use_context(ctx: typer.Context) -> AppContext:
    """Extract application context from Typer context."""
    result: AppContext = ctx.obj
    return result
