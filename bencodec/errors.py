from typing import Optional


__all__ = (
    "BencodeError",
    "BencodeDecodeError",
    "BencodeIOError",
    "BencodeEncodeError",
    "TypeMismatchError",
)


class BencodeError(Exception):
    pass


class BencodeDecodeError(BencodeError, ValueError):
    pass


class BencodeIOError(BencodeError, OSError):
    pass


class BencodeEncodeError(BencodeError, TypeError):
    def __init__(self, message: str, type_: Optional[type] = None) -> None:
        super().__init__(message)
        self.type = type_


class TypeMismatchError(BencodeError, TypeError):
    def __init__(self, message: str, type_: Optional[type] = None) -> None:
        super().__init__(message)
        self.type = type_
