"""Variable-width length prefix that precedes every word on the wire.

| Range                    | Encoding                          |
|--------------------------|-----------------------------------|
| 0x00 .. 0x7F             | 1 byte, value as-is               |
| 0x80 .. 0x3FFF           | 2 bytes, value OR 0x8000         |
| 0x4000 .. 0x1FFFFF       | 3 bytes, value OR 0xC00000       |
| 0x200000 .. 0xFFFFFFF    | 4 bytes, value OR 0xE0000000     |
| 0x10000000 .. 0xFFFFFFFF | 0xF0 followed by 4 raw bytes      |

All multi-byte forms are big-endian.
"""

from mb_routeros.errors import FrameTooLong

MAX_LENGTH = 0xFFFFFFFF

# (exclusive upper bound, width in bytes, marker bits)
_WIDTHS = (
    (0x80, 1, 0x00),
    (0x4000, 2, 0x8000),
    (0x200000, 3, 0xC00000),
    (0x10000000, 4, 0xE0000000),
)


def encode_length(length: int) -> bytes:
    """Encode a word length using the smallest form that fits.

    Raises:
        FrameTooLong: Length is negative or above 0xFFFFFFFF.

    """
    if length < 0:
        msg = f"Word length must be non-negative, got {length}."
        raise FrameTooLong(msg)
    for bound, width, marker in _WIDTHS:
        if length < bound:
            return (length | marker).to_bytes(width, "big")
    if length <= MAX_LENGTH:
        return b"\xf0" + length.to_bytes(4, "big")
    msg = f"Word is too long. Max length of word is {MAX_LENGTH}."
    raise FrameTooLong(msg)


def prefix_size(first_byte: int) -> int:
    """Return the total prefix size announced by its first byte.

    Raises:
        FrameTooLong: First byte is 0xF1 or above.

    """
    if first_byte < 0x80:
        return 1
    if first_byte < 0xC0:
        return 2
    if first_byte < 0xE0:
        return 3
    if first_byte < 0xF0:
        return 4
    if first_byte == 0xF0:
        return 5
    msg = f"Unknown length prefix byte 0x{first_byte:02X}."
    raise FrameTooLong(msg)


def decode_length(data: bytes | bytearray, offset: int = 0) -> tuple[int, int] | None:
    """Decode a length prefix starting at ``offset``.

    Returns:
        ``(length, prefix_size)``, or None if ``data`` does not yet hold the whole prefix.

    Raises:
        FrameTooLong: Prefix uses an undefined bit pattern.

    """
    if offset >= len(data):
        return None
    first = data[offset]
    size = prefix_size(first)
    if offset + size > len(data):
        return None
    if size == 1:
        return first, 1
    if size == 5:
        return int.from_bytes(data[offset + 1 : offset + 5], "big"), 5
    raw = int.from_bytes(data[offset : offset + size], "big")
    # Strip the marker bits: the top `size` bits of the prefix.
    mask = (1 << (8 * size - size)) - 1
    return raw & mask, size
