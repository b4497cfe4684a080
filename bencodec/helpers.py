from bencodec.errors import TypeMismatchError
from bencodec.value import BencodeDict, Value, UINT64_MAX, in_int64_range, is_int


__all__ = (
    "get_uint64",
    "get_int",
    "get_bytes",
    "get_list",
    "get_dict",
)


def _mismatch(expected: str, value: object) -> TypeMismatchError:
    return TypeMismatchError(
        f"Expected {expected}, got {type(value).__name__}", type(value))


def get_int(value: Value) -> int:
    if not is_int(value) or not in_int64_range(value):  # type: ignore[arg-type]
        raise _mismatch("64-bit integer", value)
    return value  # type: ignore[return-value]


def get_uint64(value: Value) -> int:
    """Return a decoded integer as unsigned 64-bit.

    Negative values are reinterpreted as two's complement, so -1 gives
    2**64 - 1.
    """
    return get_int(value) & UINT64_MAX


def get_bytes(value: Value) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise _mismatch("bytes", value)
    return bytes(value)


def get_list(value: Value) -> list[Value]:
    if not isinstance(value, list):
        raise _mismatch("list", value)
    return value


def get_dict(value: Value) -> BencodeDict:
    if not isinstance(value, dict):
        raise _mismatch("dict", value)
    return value
