"""Run a command and print its rows."""

import typer

from mb_routeros.app_context import use_context
from mb_routeros.errors import ApiError
from mb_routeros.protocol import Command, Single


def exec_(
    ctx: typer.Context,
    command: list[str] = typer.Argument(help="Command path followed by key=value, ?query or flag tokens"),
    *,
    words: bool = typer.Option(default=False, help="Send arguments unchanged as pre-formed API words"),
) -> None:
    """Run a command and print the returned rows."""
    app = use_context(ctx)
    try:
        cmd = Command.from_words(command) if words else Command.from_tokens(command)
    except ValueError as e:
        app.out.print_error_and_exit("invalid_command", str(e))
    try:
        with app.open_session() as session:
            rows = session.talk(Single(cmd))
    except ApiError as e:
        app.out.print_error_and_exit(e.code, str(e))
    app.out.print_rows(rows)
