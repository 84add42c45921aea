"""Commands sent to the appliance and the request shapes accepted by talk()."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TypeAlias

# Prefixes of words that are sent exactly as written.
_VERBATIM_PREFIXES = ("=", "?", ".tag=")


def _encode_token(token: str) -> str:
    """Turn a ``key=value`` token into an attribute word, leave everything else alone."""
    if token.startswith(_VERBATIM_PREFIXES) or "=" not in token:
        return token
    return f"={token}"


@dataclass(frozen=True, slots=True)
class Command:
    """One API command: the path word followed by attribute, query and API words."""

    words: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.words or not self.words[0]:
            msg = "Command requires a path word."
            raise ValueError(msg)

    @property
    def path(self) -> str:
        """Command path, e.g. ``/interface/print``."""
        return self.words[0]

    @staticmethod
    def parse(text: str) -> Command:
        """Build a command from ``<path> [key=value | flag ...]`` split on whitespace.

        Values containing spaces cannot be expressed this way; use from_words().
        """
        return Command.from_tokens(text.split())

    @staticmethod
    def from_tokens(tokens: Sequence[str]) -> Command:
        """Build a command from a path token followed by ``key=value`` or flag tokens."""
        if not tokens:
            msg = "Command text is empty."
            raise ValueError(msg)
        return Command(words=(tokens[0], *(_encode_token(t) for t in tokens[1:])))

    @staticmethod
    def from_words(words: Sequence[str]) -> Command:
        """Build a command from pre-formed words, passed through unchanged."""
        return Command(words=tuple(words))

    @staticmethod
    def build(path: str, attributes: Mapping[str, str] | None = None, queries: Iterable[str] = ()) -> Command:
        """Build a command from a path, ``key -> value`` attributes and raw query words."""
        attrs = [f"={key}={value}" for key, value in (attributes or {}).items()]
        return Command(words=(path, *attrs, *queries))

    def __str__(self) -> str:
        return " ".join(self.words)


@dataclass(frozen=True, slots=True)
class Single:
    """Request carrying one command."""

    command: Command


@dataclass(frozen=True, slots=True)
class Batch:
    """Request carrying several commands executed in order."""

    commands: tuple[Command, ...]


Request: TypeAlias = Single | Batch
