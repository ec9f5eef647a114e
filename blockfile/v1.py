"""
Revision 1 engine: fixed-size blocks after a 9-byte header.

Layout (big endian):
    0   u32  signature 0xB10CF11E
    4   u8   revision = 1
    5   u32  block size
    9   ...  block 0, block 1, ... each exactly block_size bytes

Block ``i`` lives at ``HEADER_SIZE_V1 + i * block_size``. Every read and
write goes straight to the file at that offset; nothing is cached and
nothing is flushed unless the caller asks via ``sync()``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .base import BlockFile
from .constants import REV_1, HEADER_SIZE_BASE, HEADER_SIZE_V1, MAX_BLOCK_SIZE
from .errors import (
    AlreadyClosed,
    BlockFileError,
    BlockIOError,
    ConfigError,
    FormatError,
    MisalignedBlockArea,
)
from .header import decode_base_header, decode_v1_extension, encode_v1_header, read_exact


logger = logging.getLogger(__name__)

_HAS_PIO = hasattr(os, "pread") and hasattr(os, "pwrite")


class BlockFileV1(BlockFile):
    def __init__(self, path: str, f: BinaryIO, block_size: int):
        self._path = path
        self._f: Optional[BinaryIO] = f
        self._block_size = block_size

    @classmethod
    def create(cls, path: Union[str, Path], block_size: int) -> "BlockFileV1":
        """Create a new container at ``path``; never overwrites an existing file."""
        path = os.fspath(path)
        logger.debug("create: path=%s block_size=%s", path, block_size)
        if not isinstance(block_size, int) or isinstance(block_size, bool):
            raise ConfigError(f"block_size must be an integer; got {block_size!r}")
        if block_size <= 0:
            raise ConfigError(f"block_size={block_size} is not allowed; must be > 0")
        if block_size > MAX_BLOCK_SIZE:
            raise ConfigError(f"block_size={block_size} does not fit in 32 bits")
        header = encode_v1_header(block_size)

        try:
            f = open(path, "x+b", buffering=0)
        except FileExistsError as exc:
            raise ConfigError(f"already exists: {path}") from exc
        except OSError as exc:
            raise BlockIOError(f"failed to create {path}: {exc}") from exc

        try:
            n = f.write(header)
        except OSError as exc:
            f.close()
            raise BlockIOError(f"failed to write header to {path}: {exc}") from exc
        if n != len(header):
            f.close()
            raise BlockIOError(
                f"failed to write header to {path}: expected {len(header)} bytes, wrote {n}"
            )
        return cls(path, f, block_size)

    @classmethod
    def open(cls, path: Union[str, Path]) -> "BlockFileV1":
        """Open an existing revision 1 container for reading and writing."""
        path = os.fspath(path)
        logger.debug("open: path=%s", path)
        try:
            f = open(path, "r+b", buffering=0)
        except FileNotFoundError as exc:
            raise BlockIOError(f"not found: {path}") from exc
        except OSError as exc:
            raise BlockIOError(f"failed to open {path}: {exc}") from exc

        try:
            raw = read_exact(f, HEADER_SIZE_V1, "header")
            base = decode_base_header(raw)
            if base.revision != REV_1:
                raise FormatError(f"expected revision {REV_1}, found revision {base.revision}")
            block_size = decode_v1_extension(raw[HEADER_SIZE_BASE:])
            if block_size == 0:
                raise FormatError("stored block size is 0")
        except (BlockFileError, OSError, ValueError):
            f.close()
            raise
        return cls(path, f, block_size)

    # Accessors

    @property
    def file_name(self) -> str:
        return self._path

    @property
    def block_size(self) -> int:
        return self._block_size

    @property
    def revision(self) -> int:
        return REV_1

    @property
    def header_size(self) -> int:
        return HEADER_SIZE_V1

    @property
    def closed(self) -> bool:
        return self._f is None

    # Block I/O

    def _file(self) -> BinaryIO:
        if self._f is None:
            raise AlreadyClosed(f"{self._path} is closed")
        return self._f

    def _offset(self, index: int) -> int:
        if index < 0:
            raise ValueError(f"block index must be non-negative; got {index}")
        return HEADER_SIZE_V1 + index * self._block_size

    def _read_at(self, f: BinaryIO, size: int, pos: int) -> bytes:
        # Stops at EOF; one call may return fewer bytes than asked.
        chunks = []
        got = 0
        while got < size:
            if _HAS_PIO:
                chunk = os.pread(f.fileno(), size - got, pos + got)
            else:
                f.seek(pos + got)
                chunk = f.read(size - got) or b""
            if not chunk:
                break
            chunks.append(chunk)
            got += len(chunk)
        return b"".join(chunks)

    def _write_at(self, f: BinaryIO, data: bytes, pos: int) -> int:
        view = memoryview(data)
        done = 0
        while done < len(data):
            if _HAS_PIO:
                n = os.pwrite(f.fileno(), view[done:], pos + done)
            else:
                f.seek(pos + done)
                n = f.write(view[done:])
            if not n:
                break
            done += n
        return done

    def read_block(self, index: int) -> bytes:
        f = self._file()
        pos = self._offset(index)
        try:
            buf = self._read_at(f, self._block_size, pos)
        except OSError as exc:
            raise BlockIOError(
                f"failed to read {self._block_size} byte block at position {pos}: {exc}"
            ) from exc
        if len(buf) != self._block_size:
            raise BlockIOError(
                f"short read of block {index} at position {pos}: "
                f"requested {self._block_size} bytes, read {len(buf)}"
            )
        return buf

    def write_block(self, data: bytes, index: int) -> int:
        f = self._file()
        pos = self._offset(index)

        blk = bytes(data)
        if len(blk) < self._block_size:
            blk += b"\x00" * (self._block_size - len(blk))
        elif len(blk) > self._block_size:
            logger.warning(
                "write_block: truncating %d byte payload to block size %d (block %d of %s)",
                len(blk), self._block_size, index, self._path,
            )
            blk = blk[: self._block_size]

        try:
            n = self._write_at(f, blk, pos)
        except OSError as exc:
            raise BlockIOError(
                f"failed to write {len(blk)} byte block at position {pos}: {exc}"
            ) from exc
        if n != len(blk):
            raise BlockIOError(
                f"didn't write whole block {index}: expected to write {len(blk)} bytes, "
                f"wrote {n}; block_size={self._block_size}"
            )
        return n

    def num_blocks(self) -> int:
        f = self._file()
        try:
            size = os.fstat(f.fileno()).st_size
        except OSError as exc:
            raise BlockIOError(f"failed to stat {self._path}: {exc}") from exc

        area = size - HEADER_SIZE_V1
        if area < 0:
            # Truncated into the header after it was opened; the remainder is the whole file.
            raise MisalignedBlockArea(0, size)
        count, rem = divmod(area, self._block_size)
        if rem != 0:
            raise MisalignedBlockArea(count, rem)
        return count

    def sync(self) -> None:
        f = self._file()
        try:
            os.fsync(f.fileno())
        except OSError as exc:
            raise BlockIOError(f"failed to sync {self._path}: {exc}") from exc

    def close(self) -> None:
        if self._f is None:
            raise AlreadyClosed(f"{self._path} is already closed")
        f, self._f = self._f, None
        logger.debug("close: path=%s", self._path)
        try:
            f.close()
        except OSError as exc:
            raise BlockIOError(f"failed to close {self._path}: {exc}") from exc
