from io import BytesIO
from typing import BinaryIO, Union

from bencodec.errors import BencodeEncodeError
from bencodec.value import (DICT_START, LIST_START, INT_START, END,
                            LENGTH_SEP, DEFAULT_MAX_DEPTH,
                            BencodeDict, Value, validate)


__all__ = (
    "BencodeEncoder",
    "dump",
    "dumps",
)


def dumps(data: dict, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    return BencodeEncoder(data, max_depth=max_depth).encode()


def dump(data: dict, fp: BinaryIO, *,
         max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    # nothing reaches fp unless the whole tree encodes
    fp.write(dumps(data, max_depth=max_depth))


class BencodeEncoder:
    def __init__(self, data: dict, *,
                 max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._data = data
        self._max_depth = max_depth
        self._buf = BytesIO()

    def encode(self) -> bytes:
        validate(self._data, self._max_depth)
        self._buf = BytesIO()
        try:
            self._encode_dict(self._data)
        except RecursionError as exc:
            raise BencodeEncodeError(
                "Maximum nesting depth exceeded the interpreter "
                "recursion limit", type(self._data)) from exc
        return self._buf.getvalue()

    def _encode(self, data: Value) -> None:
        if isinstance(data, dict):
            self._encode_dict(data)
        elif isinstance(data, list):
            self._encode_list(data)
        elif isinstance(data, (bytes, bytearray)):
            self._encode_bytes(data)
        else:
            self._encode_int(data)

    def _encode_int(self, number: int) -> None:
        self._buf.write(INT_START)
        self._buf.write(b"%d" % number)
        self._buf.write(END)

    def _encode_bytes(self, data: Union[bytes, bytearray]) -> None:
        self._buf.write(b"%d" % len(data))
        self._buf.write(LENGTH_SEP)
        self._buf.write(data)

    def _encode_list(self, data: list[Value]) -> None:
        self._buf.write(LIST_START)
        for item in data:
            self._encode(item)
        self._buf.write(END)

    def _encode_dict(self, data: BencodeDict) -> None:
        self._buf.write(DICT_START)
        # bytes compare as unsigned byte sequences
        for key in sorted(data):
            self._encode_bytes(key)
            self._encode(data[key])
        self._buf.write(END)
