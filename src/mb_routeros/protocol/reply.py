"""Classification of received sentences."""

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeAlias

from mb_routeros.errors import CommandFailed

logger = logging.getLogger(__name__)

Row: TypeAlias = dict[str, str]


class ReplyKind(StrEnum):
    """Sentence class, taken from its leading control word."""

    RE = "!re"
    DONE = "!done"
    TRAP = "!trap"
    FATAL = "!fatal"
    EMPTY = "!empty"
    UNKNOWN = ""


_TERMINAL = frozenset({ReplyKind.DONE, ReplyKind.TRAP, ReplyKind.FATAL})


@dataclass(frozen=True)
class Reply:
    """A received sentence split into its class, attributes and remaining bare words."""

    kind: ReplyKind
    attributes: dict[str, str] = field(default_factory=dict)
    words: tuple[str, ...] = ()  # words that are neither the control word nor attributes

    @property
    def is_terminal(self) -> bool:
        """True for sentences that end a command (!done, !trap, !fatal)."""
        return self.kind in _TERMINAL

    @property
    def row(self) -> Row | None:
        """Data row of an !re sentence; None when it carries no attributes."""
        if self.kind is ReplyKind.RE and self.attributes:
            return dict(self.attributes)
        return None

    @property
    def message(self) -> str:
        """Error detail of a !trap or !fatal sentence."""
        if "message" in self.attributes:
            return self.attributes["message"]
        if self.words:
            return " ".join(self.words)
        return "no message"

    def failure(self, command: str) -> CommandFailed | None:
        """CommandFailed carrying the trap message, or None if this is not a !trap."""
        if self.kind is ReplyKind.TRAP:
            return CommandFailed(command, self.message)
        return None

    @property
    def legacy_ret(self) -> str | None:
        """Value of ``=ret=`` on !done, sent by appliances speaking the pre-6.43 login dialect."""
        if self.kind is ReplyKind.DONE:
            return self.attributes.get("ret")
        return None


def parse_attribute(word: str) -> tuple[str, str] | None:
    """Split an ``=key=value`` word at the first separator after the leading ``=``.

    Returns None for words that are not attribute words or lack the separator.
    """
    if not word.startswith("="):
        return None
    key, sep, value = word[1:].partition("=")
    if not sep or not key:
        return None
    return key, value


def interpret(sentence: list[str]) -> Reply:
    """Classify a complete sentence and collect its attributes."""
    if not sentence:
        return Reply(kind=ReplyKind.UNKNOWN)

    head, rest = sentence[0], sentence[1:]
    try:
        kind = ReplyKind(head)
    except ValueError:
        logger.debug("Sentence without known control word: %r", sentence)
        kind = ReplyKind.UNKNOWN
        rest = sentence

    attributes: dict[str, str] = {}
    words: list[str] = []
    for word in rest:
        attr = parse_attribute(word)
        if attr is None:
            words.append(word)
        else:
            attributes[attr[0]] = attr[1]
    return Reply(kind=kind, attributes=attributes, words=tuple(words))
