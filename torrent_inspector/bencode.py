# /usr/bin/env python3
import logging
import re

from torrent_inspector.cursor import ByteCursor
from torrent_inspector.elements import ByteString, Dictionary, Element, Integer, List

logger = logging.getLogger(__name__)

# Deepest list/dictionary nesting accepted before giving up
MAX_DEPTH = 256
# Highest max_depth a caller may ask for
MAX_DEPTH_LIMIT = 400

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INTEGER_REGEX = re.compile(rb"-?\d+")
_DIGITS = b"0123456789"


def loads(data, max_depth: int = MAX_DEPTH) -> Element:
    """Deserialize ``data`` (``bytes`` or ``bytearray`` instance
    containing a Bencoded document) to an element tree with byte offsets.
    """
    return Decoder(data, max_depth=max_depth).decode()


def load(fp, max_depth: int = MAX_DEPTH) -> Element:
    """Deserialize ``fp`` (a ``.read()``-supporting binary file-like object
    containing a Bencoded document) to an element tree with byte offsets.
    """
    return Decoder(fp.read(), max_depth=max_depth).decode()


class BencodeDecodingError(ValueError):
    def __init__(self, message: str, position: int):
        super().__init__(message)
        self.position = position


class TruncatedInputError(BencodeDecodingError):
    ...


class InvalidTagError(BencodeDecodingError):
    ...


class MalformedNumberError(BencodeDecodingError):
    ...


class NestingTooDeepError(BencodeDecodingError):
    ...


class Decoder:
    """Bencode decoder that keeps track of where every value was found

    Performs the following translations in decoding:
    +---------------+-------------------+
    | Bencode       | Element           |
    +===============+===================+
    | integer       | Integer           |
    +---------------+-------------------+
    | string        | ByteString        |
    +---------------+-------------------+
    | list          | List              |
    +---------------+-------------------+
    | dictionary    | Dictionary        |
    +---------------+-------------------+
    """

    def __init__(self, data, max_depth: int = MAX_DEPTH):
        self._cursor = ByteCursor(data)
        self._max_depth = max_depth
        self._depth = 0

        self.decoder_call = {
            ord("i"): self.decode_int,
            ord("l"): self.decode_list,
            ord("d"): self.decode_dict,
        }
        for digit in _DIGITS:
            self.decoder_call[digit] = self.decode_str

    def _current_byte(self) -> int:
        """Peek current byte, failing at end of input"""
        byte = self._cursor.peek()
        if byte is None:
            raise TruncatedInputError(
                f"Unexpected end of input at position {self._cursor.position}",
                self._cursor.position,
            )
        return byte

    def _consume_byte(self) -> int:
        """Read byte"""
        byte = self._current_byte()
        self._cursor.advance()
        return byte

    def _enter(self, start: int) -> None:
        self._depth += 1
        if self._depth > self._max_depth:
            raise NestingTooDeepError(
                f"Nesting deeper than {self._max_depth} levels at position {start}", start
            )

    def decode_int(self) -> Integer:
        start = self._cursor.position
        # discard 'i' begin token
        self._cursor.advance()
        position = self._cursor.position
        literal = bytearray()
        while self._current_byte() != ord("e"):
            literal += bytes([self._consume_byte()])
        # discard 'e' end token
        self._cursor.advance()

        # leading zeros and "-0" are let through
        if not _INTEGER_REGEX.fullmatch(literal):
            raise MalformedNumberError(
                f"Invalid integer encoding {bytes(literal)!r} at position {position}", position
            )
        value = int(literal)
        if not INT64_MIN <= value <= INT64_MAX:
            raise MalformedNumberError(
                f"Integer {value} at position {position} does not fit in 64 bits", position
            )
        return Integer(value, start, self._cursor.position)

    def decode_str(self) -> ByteString:
        start = self._cursor.position
        length = 0
        while self._current_byte() != ord(":"):
            # unclosed str length
            if self._current_byte() not in _DIGITS:
                raise MalformedNumberError(
                    f"Invalid token {bytes([self._current_byte()])!r} in string length "
                    f'at position {self._cursor.position}, missing ":"?',
                    self._cursor.position,
                )
            length = length * 10 + self._consume_byte() - ord("0")
        self._cursor.advance()

        try:
            payload = self._cursor.take(length)
        except EOFError:
            raise TruncatedInputError(
                f"String of {length} bytes at position {start} runs past the end of input "
                f"({self._cursor.remaining} bytes left)",
                self._cursor.position,
            ) from None
        return ByteString(payload, start, self._cursor.position)

    def decode_list(self) -> List:
        start = self._cursor.position
        self._enter(start)
        # discard 'l' begin token
        self._cursor.advance()
        items = []
        while self._current_byte() != ord("e"):
            items.append(self.decode_element())
        # discard 'e' end token
        self._cursor.advance()
        self._depth -= 1
        return List(tuple(items), start, self._cursor.position)

    def decode_dict(self) -> Dictionary:
        start = self._cursor.position
        self._enter(start)
        # discard 'd' begin token
        self._cursor.advance()
        entries: dict[bytes, Element] = {}
        while self._current_byte() != ord("e"):
            if self._current_byte() not in _DIGITS:
                raise InvalidTagError(
                    f"Dictionary key at position {self._cursor.position} must be a string, "
                    f"got token {bytes([self._current_byte()])!r}",
                    self._cursor.position,
                )
            key = self.decode_str()
            if key.value in entries:
                logger.debug("Duplicate dictionary key %r at position %d", key.value, key.start)
            # later values replace earlier ones for a repeated key
            entries[key.value] = self.decode_element()
        # discard 'e' end token
        self._cursor.advance()
        self._depth -= 1
        return Dictionary(entries, start, self._cursor.position)

    def decode_element(self) -> Element:
        token = self._current_byte()
        if token in self.decoder_call:
            return self.decoder_call[token]()
        raise InvalidTagError(
            f"Unexpected token {bytes([token])!r} at position {self._cursor.position}",
            self._cursor.position,
        )

    def decode(self) -> Element:
        """Decodes one element from the current position, normally the whole document"""
        try:
            element = self.decode_element()
        except RecursionError:
            # a max_depth above what the interpreter stack can hold
            raise NestingTooDeepError(
                f"Nesting too deep for the interpreter stack at position {self._cursor.position}",
                self._cursor.position,
            ) from None
        if not self._cursor.at_end:
            logger.warning(
                "Ignoring %d trailing bytes after position %d",
                self._cursor.remaining,
                self._cursor.position,
            )
        return element
