"""Check that the appliance answers."""

import typer

from mb_routeros.app_context import use_context
from mb_routeros.errors import ApiError


def probe(ctx: typer.Context) -> None:
    """Log in and check the appliance answers within the probe timeout."""
    app = use_context(ctx)
    try:
        with app.open_session() as session:
            alive = session.probe()
    except ApiError as e:
        app.out.print_error_and_exit(e.code, str(e))
    app.out.print_probe(alive=alive)
