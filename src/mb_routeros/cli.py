"""CLI entry point for mb-routeros."""

from pathlib import Path
from typing import Annotated

import typer
from mm_clikit import TyperPlus

from mb_routeros.app_context import AppContext
from mb_routeros.commands.exec_ import exec_
from mb_routeros.commands.probe import probe
from mb_routeros.commands.stream import stream
from mb_routeros.config import Config
from mb_routeros.log import setup_logging
from mb_routeros.output import Output

app = TyperPlus(package_name="mb-routeros")


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    json_output: Annotated[bool, typer.Option("--json", help="Output results as JSON.")] = False,
    data_dir: Annotated[Path | None, typer.Option("--data-dir", help="Data directory path.")] = None,
    address: Annotated[str | None, typer.Option("--address", "-a", help="Appliance host or IP address.")] = None,
    user: Annotated[str | None, typer.Option("--user", "-u", help="Login name.")] = None,
    password: Annotated[str | None, typer.Option("--password", envvar="MB_ROUTEROS_PASSWORD", help="Login password.")] = None,
    use_tls: Annotated[bool, typer.Option("--tls", help="Use the TLS API service.")] = False,
    port: Annotated[int | None, typer.Option("--port", "-p", help="API port (default 8728, or 8729 with --tls).")] = None,
    timeout: Annotated[float | None, typer.Option("--timeout", help="Socket timeout in seconds.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Echo protocol traffic to stderr.")] = False,
) -> None:
    """Talk to network appliances over the binary API protocol."""
    out = Output(json_mode=json_output)
    try:
        cfg = Config.build(
            data_dir,
            address=address,
            user=user,
            password=password,
            use_tls=use_tls or None,
            port=port,
            timeout=timeout,
            verbose=verbose or None,
        )
    except ValueError as e:
        out.print_error_and_exit("invalid_config", str(e))
    cfg.data_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(cfg.log_path, verbose=cfg.verbose)
    ctx.obj = AppContext(out=out, cfg=cfg)


app.command("exec", aliases=["x"])(exec_)
app.command(aliases=["s"])(stream)
app.command(aliases=["p"])(probe)
