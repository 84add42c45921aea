"""Word and sentence framing on top of the length codec.

A word is ``<length prefix><UTF-8 bytes>``. A sentence is a run of words
closed by a zero-length word (a lone ``0x00`` byte).
"""

from collections.abc import Iterable, Iterator

from mb_routeros.protocol.length import decode_length, encode_length

SENTENCE_END = b"\x00"


def encode_word(word: str) -> bytes:
    """Encode one word with its length prefix (length of the UTF-8 bytes)."""
    data = word.encode()
    return encode_length(len(data)) + data


def encode_sentence(words: Iterable[str]) -> bytes:
    """Encode words followed by the zero-length terminator."""
    return b"".join(encode_word(word) for word in words) + SENTENCE_END


class SentenceReader:
    """Incremental decoder turning a byte stream into sentences.

    Bytes are appended with feed(); complete sentences are taken with
    next_sentence(). A sentence is only handed out once its terminator has
    arrived. Words of an unfinished sentence are kept between calls, and bytes
    of an unfinished word stay in the buffer until the rest of it is fed.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._words: list[str] = []  # words of the sentence currently being assembled

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet decoded into words."""
        return len(self._buffer)

    def feed(self, data: bytes) -> None:
        """Append bytes received from the transport."""
        self._buffer.extend(data)

    def next_sentence(self) -> list[str] | None:
        """Return the next complete sentence, or None if more bytes are needed.

        Raises:
            FrameTooLong: A word carries an undefined length prefix.

        """
        while True:
            decoded = decode_length(self._buffer)
            if decoded is None:
                return None
            length, size = decoded
            if len(self._buffer) < size + length:
                return None
            word = bytes(self._buffer[size : size + length])
            del self._buffer[: size + length]
            if length == 0:
                sentence, self._words = self._words, []
                return sentence
            self._words.append(word.decode(errors="replace"))

    def sentences(self) -> Iterator[list[str]]:
        """Yield every complete sentence currently buffered."""
        while (sentence := self.next_sentence()) is not None:
            yield sentence

    def clear(self) -> None:
        """Drop buffered bytes and any partially assembled sentence."""
        self._buffer.clear()
        self._words = []
