"""Wire protocol: length codec, framing, commands and reply classification."""

from mb_routeros.protocol.command import Batch as Batch
from mb_routeros.protocol.command import Command as Command
from mb_routeros.protocol.command import Request as Request
from mb_routeros.protocol.command import Single as Single
from mb_routeros.protocol.framing import SentenceReader as SentenceReader
from mb_routeros.protocol.framing import encode_sentence as encode_sentence
from mb_routeros.protocol.reply import Reply as Reply
from mb_routeros.protocol.reply import ReplyKind as ReplyKind
from mb_routeros.protocol.reply import Row as Row
from mb_routeros.protocol.reply import interpret as interpret
