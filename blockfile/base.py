from __future__ import annotations

import abc
from typing import Iterator, Tuple

from .errors import MisalignedBlockArea


class BlockFile(abc.ABC):
    """Handle on one open container, whatever its revision.

    Usage:
        with create_container("data.bf", REV_1, 4096) as bf:
            bf.write_block(b"hello", 0)

        with open_container("data.bf") as bf:
            for index, data in bf.iter_blocks():
                ...

    A handle owns its file exclusively and is not thread-safe; wrap it in
    ``LockedBlockFile`` to share it between threads.
    """

    @classmethod
    @abc.abstractmethod
    def create(cls, path, block_size: int) -> "BlockFile":
        """Create a new container file and return a handle on it."""

    @classmethod
    @abc.abstractmethod
    def open(cls, path) -> "BlockFile":
        """Open an existing container file of this engine's revision."""

    @abc.abstractmethod
    def read_block(self, index: int) -> bytes:
        """Return exactly ``block_size`` bytes stored at ``index``."""

    @abc.abstractmethod
    def write_block(self, data: bytes, index: int) -> int:
        """Store ``data`` at ``index``, normalized to ``block_size``; return bytes written."""

    @abc.abstractmethod
    def num_blocks(self) -> int:
        """Number of whole blocks; raises MisalignedBlockArea on a partial tail."""

    @property
    @abc.abstractmethod
    def block_size(self) -> int: ...

    @property
    @abc.abstractmethod
    def revision(self) -> int: ...

    @property
    @abc.abstractmethod
    def header_size(self) -> int: ...

    @property
    @abc.abstractmethod
    def file_name(self) -> str: ...

    @property
    @abc.abstractmethod
    def closed(self) -> bool: ...

    @abc.abstractmethod
    def sync(self) -> None:
        """Flush written blocks to stable storage."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the file. A second call raises AlreadyClosed."""

    def iter_blocks(self) -> Iterator[Tuple[int, bytes]]:
        # A partial trailing block is skipped; callers wanting to know use num_blocks().
        try:
            count = self.num_blocks()
        except MisalignedBlockArea as exc:
            count = exc.count
        for index in range(count):
            yield index, self.read_block(index)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self.closed:
            self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return (
            f"<{type(self).__name__} {self.file_name!r} rev={self.revision} "
            f"block_size={self.block_size} {state}>"
        )
