import re

from io import BytesIO
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional, Union

from bencodec.errors import BencodeError, BencodeDecodeError, BencodeIOError
from bencodec.value import (DICT_START, LIST_START, INT_START, END,
                            LENGTH_SEP, INT64_MAX, UINT64_MAX,
                            DEFAULT_MAX_DEPTH,
                            BencodeDict, Value, in_int64_range)


__all__ = (
    "BencodeDecoder",
    "ByteCursor",
    "load",
    "loads",
)


READ_CHUNK_SIZE = 64 * 1024

DIGITS = b"0123456789"
SIGNED_DIGITS = b"-" + DIGITS

INT_RE = re.compile(rb"-?[0-9]+")
STRICT_INT_RE = re.compile(rb"0|-?[1-9][0-9]*")
LENGTH_RE = re.compile(rb"[0-9]+")
STRICT_LENGTH_RE = re.compile(rb"0|[1-9][0-9]*")


def loads(data: Union[bytes, bytearray, memoryview], *,
          strict: bool = False,
          max_depth: int = DEFAULT_MAX_DEPTH) -> BencodeDict:
    return load(BytesIO(data), strict=strict, max_depth=max_depth)


def load(fp: BinaryIO, *,
         strict: bool = False,
         max_depth: int = DEFAULT_MAX_DEPTH) -> BencodeDict:
    """Decode one document from the binary stream `fp`.

    Structural bytes are read one at a time, so `fp` should be buffered:
    wrap unbuffered streams (`open(path, "rb", buffering=0)`, socket
    files) in `io.BufferedReader`. Bytes after the document stay unread
    in `fp`.
    """
    return BencodeDecoder(fp, strict=strict, max_depth=max_depth).decode()


def _to_int(token: bytes) -> int:
    # int() refuses very long digit strings, and past 20 significant
    # digits the value is outside 64 bits anyway
    sign = -1 if token.startswith(b"-") else 1
    digits = token.lstrip(b"-").lstrip(b"0") or b"0"
    if len(digits) > 20:
        return sign * (UINT64_MAX + 1)
    return sign * int(digits)


@contextmanager
def _stage(name: str) -> Iterator[None]:
    # prefix the failing stage, innermost last: "read value: read key: ..."
    try:
        yield
    except BencodeError as exc:
        exc.args = (f"{name}: {exc}",)
        raise


class ByteCursor:
    """Reading position over a binary stream with one byte of lookahead.

    Only consumed bytes are pulled from the stream, apart from a single
    peeked byte, so whatever follows the document stays unread.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._peeked: Optional[bytes] = None
        self.position = 0

    def peek(self) -> bytes:
        if self._peeked is None:
            self._peeked = self._read(1)
        if not self._peeked:
            self._peeked = None
            raise BencodeIOError(
                f"unexpected end of stream at position {self.position}")
        return self._peeked

    def read_byte(self) -> bytes:
        ch = self.peek()
        self._peeked = None
        self.position += 1
        return ch

    def read_until(self, terminator: bytes, alphabet: bytes) -> bytes:
        """Read up to `terminator`, which is consumed but not returned.

        Any byte outside `alphabet` met before the terminator is an error.
        """
        token = bytearray()
        while True:
            ch = self.read_byte()
            if ch == terminator:
                return bytes(token)
            if ch not in alphabet:
                raise BencodeDecodeError(
                    f"unexpected byte {ch!r} at position {self.position - 1}")
            token += ch

    def read_exact(self, size: int) -> bytes:
        data = bytearray()
        if size and self._peeked:
            data += self._peeked
            self._peeked = None
        # chunked so a bogus length cannot force a huge allocation
        while len(data) < size:
            chunk = self._read(min(size - len(data), READ_CHUNK_SIZE))
            if not chunk:
                raise BencodeIOError(
                    f"unexpected end of stream at position "
                    f"{self.position + len(data)}: "
                    f"expected {size} bytes, got {len(data)}")
            data += chunk
        self.position += size
        return bytes(data)

    def _read(self, size: int) -> bytes:
        try:
            return self._stream.read(size) or b""
        except (OSError, ValueError) as exc:
            raise BencodeIOError(
                f"read failed at position {self.position}: {exc}") from exc


class BencodeDecoder:
    def __init__(self, stream: BinaryIO, *,
                 strict: bool = False,
                 max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._cursor = ByteCursor(stream)
        self._strict = strict
        self._max_depth = max_depth

    @property
    def position(self) -> int:
        return self._cursor.position

    def decode(self) -> BencodeDict:
        with _stage("read root type"):
            ch = self._cursor.peek()
        if ch != DICT_START:
            raise BencodeDecodeError(
                f"not a valid document: root must be a dictionary, "
                f"got {ch!r}")
        try:
            return self._decode_dict(1)
        except RecursionError as exc:
            # max_depth set above what the interpreter stack can hold
            raise BencodeDecodeError(
                f"maximum nesting depth exceeded the interpreter "
                f"recursion limit at position {self.position}") from exc

    def _decode(self, depth: int) -> Value:
        ch = self._cursor.peek()
        if ch == DICT_START:
            return self._decode_dict(depth)
        elif ch == LIST_START:
            return self._decode_list(depth)
        elif ch == INT_START:
            return self._decode_int()
        elif ch.isdigit():
            return self._decode_string()
        else:
            raise BencodeDecodeError(
                f"invalid type byte {ch!r} at position {self.position}")

    def _enter(self, depth: int) -> None:
        if depth > self._max_depth:
            raise BencodeDecodeError(
                f"maximum nesting depth {self._max_depth} exceeded "
                f"at position {self.position}")
        self._cursor.read_byte()

    def _decode_int(self) -> int:
        begin = self.position
        self._cursor.read_byte()
        with _stage("read integer"):
            token = self._cursor.read_until(END, SIGNED_DIGITS)
        pattern = STRICT_INT_RE if self._strict else INT_RE
        if not pattern.fullmatch(token):
            raise BencodeDecodeError(
                f"malformed integer {token!r} at position {begin}")
        number = _to_int(token)
        if not in_int64_range(number):
            raise BencodeDecodeError(
                f"integer {token.decode()} at position {begin} "
                f"does not fit 64 bits")
        return number

    def _decode_length(self) -> int:
        begin = self.position
        token = self._cursor.read_until(LENGTH_SEP, DIGITS)
        pattern = STRICT_LENGTH_RE if self._strict else LENGTH_RE
        if not pattern.fullmatch(token):
            raise BencodeDecodeError(
                f"malformed length {token!r} at position {begin}")
        length = _to_int(token)
        if length > INT64_MAX:
            raise BencodeDecodeError(
                f"length {token.decode()} at position {begin} is too large")
        return length

    def _decode_string(self) -> bytes:
        with _stage("read length"):
            length = self._decode_length()
        with _stage("read bytes"):
            return self._cursor.read_exact(length)

    def _decode_list(self, depth: int) -> list[Value]:
        self._enter(depth)
        blist: list[Value] = []
        while True:
            with _stage("read type"):
                ch = self._cursor.peek()
            if ch == END:
                break
            with _stage("read value"):
                blist.append(self._decode(depth + 1))
        self._cursor.read_byte()
        return blist

    def _decode_dict(self, depth: int) -> BencodeDict:
        self._enter(depth)
        bdict: BencodeDict = {}
        last_key: Optional[bytes] = None
        while True:
            with _stage("read dictionary end"):
                ch = self._cursor.peek()
            if ch == END:
                break
            with _stage("read key"):
                key = self._decode_string()
                if self._strict:
                    self._check_key_order(last_key, key)
            with _stage("read value type"):
                ch = self._cursor.peek()
            if ch == END:
                if self._strict:
                    raise BencodeDecodeError(
                        f"key {key!r} has no value "
                        f"at position {self.position}")
                break
            with _stage("read value"):
                bdict[key] = self._decode(depth + 1)
            last_key = key
        self._cursor.read_byte()
        return bdict

    def _check_key_order(self, last_key: Optional[bytes], key: bytes) -> None:
        if last_key is None or last_key < key:
            return
        if last_key == key:
            raise BencodeDecodeError(
                f"duplicate key {key!r} before position {self.position}")
        raise BencodeDecodeError(
            f"key {key!r} is out of order after {last_key!r} "
            f"before position {self.position}")
