"""Structured output for CLI and JSON modes."""

# ruff: noqa: T201 - this module is the output layer; print() is its sole mechanism for producing CLI output.

import json
import sys
from typing import NoReturn

import typer

from mb_routeros.protocol import Row


class Output:
    """Handles all CLI output in JSON or human-readable format."""

    def __init__(self, *, json_mode: bool) -> None:
        """Initialize output handler.

        Args:
            json_mode: If True, output JSON envelopes; otherwise human-readable text.

        """
        self._json_mode = json_mode

    def _success(self, data: dict[str, object], message: str) -> None:
        """Print a success result in JSON or human-readable format."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": data}))
        else:
            print(message)

    def print_error_and_exit(self, code: str, message: str) -> NoReturn:
        """Print an error in JSON or human-readable format and exit with code 1.

        Raises:
            typer.Exit: Always, with code 1.

        """
        if self._json_mode:
            print(json.dumps({"ok": False, "error": code, "message": message}))
        else:
            print(f"Error: {message}", file=sys.stderr)
        raise typer.Exit(code=1)

    # --- Commands ---

    def print_rows(self, rows: list[Row]) -> None:
        """Print all rows returned by a command."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": {"rows": rows}}))
            return
        if not rows:
            print("No rows.")
        for i, row in enumerate(rows):
            if i:
                print()
            self._print_row_text(row)

    def print_stream_row(self, row: Row) -> None:
        """Print one row as soon as it arrives: a JSON line or a text block."""
        if self._json_mode:
            print(json.dumps(row), flush=True)
        else:
            self._print_row_text(row)
            print(flush=True)

    def print_stream_end(self, outcome: str, message: str = "") -> None:
        """Print how a stream ended."""
        data: dict[str, object] = {"outcome": outcome}
        if message:
            data["message"] = message
        self._success(data, f"Stream {outcome}." + (f" {message}" if message else ""))

    def print_probe(self, *, alive: bool) -> None:
        """Print probe result."""
        self._success({"alive": alive}, f"Appliance: {'alive' if alive else 'not responding'}.")

    @staticmethod
    def _print_row_text(row: Row) -> None:
        width = max((len(key) for key in row), default=0)
        for key, value in row.items():
            print(f"{key:<{width}}  {value}")
