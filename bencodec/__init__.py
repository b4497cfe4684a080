__version__ = "0.1.0"

import sys
import logging
import argparse

from pprint import pprint
from io import BytesIO
from typing import Optional

from bencodec.errors import (BencodeError,
                             BencodeDecodeError,
                             BencodeIOError,
                             BencodeEncodeError,
                             TypeMismatchError)
from bencodec.value import DEFAULT_MAX_DEPTH, BencodeDict, Value, validate
from bencodec.decoder import BencodeDecoder, load, loads
from bencodec.encoder import BencodeEncoder, dump, dumps
from bencodec.helpers import (get_uint64, get_int, get_bytes,
                              get_list, get_dict)


__all__ = (
    "BencodeDecoder",
    "BencodeEncoder",
    "BencodeError",
    "BencodeDecodeError",
    "BencodeIOError",
    "BencodeEncodeError",
    "TypeMismatchError",
    "BencodeDict",
    "Value",
    "DEFAULT_MAX_DEPTH",
    "validate",
    "load",
    "loads",
    "dump",
    "dumps",
    "get_uint64",
    "get_int",
    "get_bytes",
    "get_list",
    "get_dict",
    "main",
)


logger = logging.getLogger(__name__)

LOG_FMT = "%(levelname)s %(name)s: %(message)s"

EXIT_NOT_CANONICAL = 1
EXIT_DECODE_ERROR = 2


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="bencodec", description="Decode and inspect a bencoded document")
    parser.add_argument("-f", "--file", type=str,
                        help="document to decode, stdin if omitted")
    parser.add_argument("--strict", action="store_true",
                        help="accept canonical encodings only")
    parser.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH)
    parser.add_argument("--check", action="store_true",
                        help="exit with 1 if the document is not canonical")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FMT)

    source = args.file or "<stdin>"
    try:
        raw = _read_input(args.file)
    except OSError as exc:
        logger.error("Can't read %s: %s", source, exc)
        return EXIT_DECODE_ERROR

    decoder = BencodeDecoder(BytesIO(raw),
                             strict=args.strict,
                             max_depth=args.max_depth)
    try:
        data = decoder.decode()
    except BencodeError as exc:
        logger.error("Can't decode %s: %s", source, exc)
        return EXIT_DECODE_ERROR

    logger.debug("Decoded %d bytes from %s, %d keys at the root",
                 decoder.position, source, len(data))
    if decoder.position < len(raw):
        logger.warning("%d trailing bytes after the document are ignored",
                       len(raw) - decoder.position)

    pprint(data)

    if args.check:
        try:
            canonical = dumps(data, max_depth=args.max_depth)
        except BencodeError as exc:
            logger.error("Can't re-encode %s: %s", source, exc)
            return EXIT_DECODE_ERROR
        if canonical != raw[:decoder.position]:
            logger.warning("%s is not canonically encoded", source)
            return EXIT_NOT_CANONICAL
        logger.debug("%s is canonically encoded", source)
    return 0


def _read_input(path: Optional[str]) -> bytes:
    if path is None:
        return sys.stdin.buffer.read()
    with open(path, "rb") as fin:
        return fin.read()
