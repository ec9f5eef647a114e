from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

from .constants import SIGNATURE, KNOWN_REVISIONS, REV_1, HEADER_SIZE_BASE
from .errors import BlockIOError, FormatError


_BASE_STRUCT = struct.Struct(">IB")    # signature u32, revision u8
_V1_EXT_STRUCT = struct.Struct(">I")   # block_size u32


@dataclass(frozen=True)
class BaseHeader:
    signature: int
    revision: int


def encode_header(revision: int, extension: bytes = b"") -> bytes:
    """Signature + revision byte + revision-specific bytes, no padding."""
    return _BASE_STRUCT.pack(SIGNATURE, revision) + bytes(extension)


def encode_v1_header(block_size: int) -> bytes:
    return encode_header(REV_1, _V1_EXT_STRUCT.pack(block_size))


def decode_base_header(raw: bytes) -> BaseHeader:
    """Parse the leading 5 bytes shared by every revision.

    A buffer that is too short is an I/O failure: the caller did not manage
    to read the header, which says nothing about the file's format.
    """
    if len(raw) < HEADER_SIZE_BASE:
        raise BlockIOError(
            f"short header: expected {HEADER_SIZE_BASE} bytes, got {len(raw)}"
        )
    sig, rev = _BASE_STRUCT.unpack_from(raw, 0)
    if sig != SIGNATURE:
        raise FormatError(f"bad signature: 0x{sig:08x} != 0x{SIGNATURE:08x}")
    if rev not in KNOWN_REVISIONS:
        raise FormatError(f"unsupported revision: {rev}")
    return BaseHeader(signature=sig, revision=rev)


def decode_v1_extension(raw: bytes) -> int:
    """Return the block size stored after the base header."""
    if len(raw) < _V1_EXT_STRUCT.size:
        raise BlockIOError(
            f"short header extension: expected {_V1_EXT_STRUCT.size} bytes, got {len(raw)}"
        )
    (block_size,) = _V1_EXT_STRUCT.unpack_from(raw, 0)
    return block_size


def read_exact(f: BinaryIO, size: int, what: str = "data") -> bytes:
    raw = f.read(size)
    if raw is None:
        raw = b""
    if len(raw) != size:
        raise BlockIOError(f"failed to read {what}: expected {size} bytes, read {len(raw)}")
    return raw


def probe(path: Union[str, Path]) -> BaseHeader:
    """Read and validate the base header of ``path`` without opening a handle."""
    try:
        with open(path, "rb") as f:
            raw = f.read(HEADER_SIZE_BASE)
    except FileNotFoundError as exc:
        raise BlockIOError(f"not found: {path}") from exc
    except OSError as exc:
        raise BlockIOError(f"failed to open {path}: {exc}") from exc
    return decode_base_header(raw)


def is_blockfile(path: Union[str, Path]) -> bool:
    """Fast check: does the file start with the container signature?"""
    try:
        with open(path, "rb") as f:
            head = f.read(4)
    except OSError:
        return False
    return len(head) == 4 and struct.unpack(">I", head)[0] == SIGNATURE
