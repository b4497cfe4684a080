from typing import Union

from bencodec.errors import BencodeEncodeError


__all__ = (
    "Value",
    "BencodeDict",
    "DICT_START",
    "LIST_START",
    "INT_START",
    "END",
    "LENGTH_SEP",
    "INT64_MIN",
    "INT64_MAX",
    "UINT64_MAX",
    "DEFAULT_MAX_DEPTH",
    "in_int64_range",
    "is_int",
    "validate",
)


Value = Union[bytes, int, list["Value"], dict[bytes, "Value"]]
BencodeDict = dict[bytes, Value]

DICT_START = b"d"
LIST_START = b"l"
INT_START = b"i"
END = b"e"
LENGTH_SEP = b":"

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1

# Keeps the recursive walks well below the interpreter recursion limit.
DEFAULT_MAX_DEPTH = 256


def is_int(obj: object) -> bool:
    # bool is an int subclass but not a bencode integer
    return isinstance(obj, int) and not isinstance(obj, bool)


def in_int64_range(number: int) -> bool:
    """Whether `number` fits a signed or an unsigned 64-bit integer."""
    return INT64_MIN <= number <= UINT64_MAX


def validate(obj: object, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    """Check that `obj` is a dict-rooted tree of supported values.

    Raises BencodeEncodeError naming the first unsupported type met in
    depth-first order. Nothing is converted or copied.
    """
    if not isinstance(obj, dict):
        raise BencodeEncodeError(
            f"Root object must be dict, not {type(obj).__name__}", type(obj))
    try:
        _validate(obj, max_depth, 0)
    except RecursionError as exc:
        raise BencodeEncodeError(
            "Maximum nesting depth exceeded the interpreter recursion limit",
            type(obj)) from exc


def _validate(obj: object, max_depth: int, depth: int) -> None:
    if isinstance(obj, (bytes, bytearray)):
        return
    if is_int(obj):
        if not in_int64_range(obj):  # type: ignore[arg-type]
            raise BencodeEncodeError(
                f"Integer {obj} does not fit 64 bits", int)
        return
    if isinstance(obj, (list, dict)):
        if depth >= max_depth:
            raise BencodeEncodeError(
                f"Maximum nesting depth {max_depth} exceeded", type(obj))
        if isinstance(obj, list):
            for item in obj:
                _validate(item, max_depth, depth + 1)
        else:
            for key, item in obj.items():
                if not isinstance(key, bytes):
                    raise BencodeEncodeError(
                        f"Dictionary key of type {type(key).__name__} "
                        f"is not Bencode serializable", type(key))
                _validate(item, max_depth, depth + 1)
        return
    raise BencodeEncodeError(
        f"Object of type {type(obj).__name__} is not Bencode serializable",
        type(obj))
