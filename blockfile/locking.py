from __future__ import annotations

import threading

from .base import BlockFile


class LockedBlockFile(BlockFile):
    """Serialize every operation on a wrapped handle under one lock.

    Engines do no locking of their own. Sharing a handle between threads
    (e.g. a writer extending the file while a reader calls num_blocks) needs
    this wrapper or an equivalent discipline in the caller.

    ``iter_blocks`` takes the lock once per block, so writers can interleave
    with a long scan.
    """

    def __init__(self, inner: BlockFile):
        self._inner = inner
        self._lock = threading.RLock()

    @classmethod
    def create(cls, path, block_size: int) -> "LockedBlockFile":
        raise TypeError("wrap a handle returned by create_container() instead")

    @classmethod
    def open(cls, path) -> "LockedBlockFile":
        raise TypeError("wrap a handle returned by open_container() instead")

    @property
    def inner(self) -> BlockFile:
        return self._inner

    def read_block(self, index: int) -> bytes:
        with self._lock:
            return self._inner.read_block(index)

    def write_block(self, data: bytes, index: int) -> int:
        with self._lock:
            return self._inner.write_block(data, index)

    def num_blocks(self) -> int:
        with self._lock:
            return self._inner.num_blocks()

    @property
    def block_size(self) -> int:
        return self._inner.block_size

    @property
    def revision(self) -> int:
        return self._inner.revision

    @property
    def header_size(self) -> int:
        return self._inner.header_size

    @property
    def file_name(self) -> str:
        return self._inner.file_name

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._inner.closed

    def sync(self) -> None:
        with self._lock:
            self._inner.sync()

    def close(self) -> None:
        with self._lock:
            self._inner.close()

    def __exit__(self, exc_type, exc, tb):
        with self._lock:
            if not self._inner.closed:
                self._inner.close()
