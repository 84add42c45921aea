"""Stream rows of a long-running command."""

import typer

from mb_routeros.app_context import use_context
from mb_routeros.errors import ApiError
from mb_routeros.protocol import Command
from mb_routeros.session import StreamOutcome


def stream(
    ctx: typer.Context,
    command: list[str] = typer.Argument(help="Command path followed by key=value, ?query or flag tokens"),
    *,
    words: bool = typer.Option(default=False, help="Send arguments unchanged as pre-formed API words"),
    limit: int = typer.Option(0, "--limit", "-n", min=0, help="Stop after N rows (0 = until the command ends)"),
) -> None:
    """Print rows as they arrive, e.g. for /tool/torch or /interface/monitor-traffic."""
    app = use_context(ctx)
    try:
        cmd = Command.from_words(command) if words else Command.from_tokens(command)
    except ValueError as e:
        app.out.print_error_and_exit("invalid_command", str(e))
    try:
        with app.open_session() as session, session.stream(cmd) as rows:
            for count, row in enumerate(rows, start=1):
                app.out.print_stream_row(row)
                if limit and count >= limit:
                    break
    except ApiError as e:
        app.out.print_error_and_exit(e.code, str(e))

    if rows.outcome is StreamOutcome.TRAPPED and rows.error is not None:
        app.out.print_error_and_exit(rows.error.code, str(rows.error))
    app.out.print_stream_end(rows.outcome)
