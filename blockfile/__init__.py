"""
blockfile: versioned container of fixed-size, randomly addressable blocks.

A container is one file: a small header (signature 0xB10CF11E, a revision
byte, revision-specific fields) followed by a block region. Revision 1 stores
the block size in the header and lays blocks out back to back, so block ``i``
sits at ``9 + i * block_size``.

Features:

- Header codec and revision dispatch; reserved revisions (2, 3) are refused
  as not implemented, anything else as unsupported.
- Positioned block reads/writes with strict short-I/O checking.
- Alignment check that reports a partial trailing block instead of hiding it.
- Optional lock wrapper for sharing a handle between threads.
- ``blockfile`` CLI for creating, inspecting, reading and writing containers.

Higher layers (page stores, logs, indexes) own allocation, caching and
crash consistency; this package does none of that.
"""

import logging

from .constants import SIGNATURE, REV_1, REV_2, REV_3, HEADER_SIZE_BASE, HEADER_SIZE_V1
from .errors import (
    BlockFileError,
    BlockIOError,
    FormatError,
    ConfigError,
    UnimplementedRevision,
    MisalignedBlockArea,
    AlreadyClosed,
)
from .base import BlockFile
from .v1 import BlockFileV1
from .dispatch import create_container, open_container, register_revision, implemented_revisions
from .locking import LockedBlockFile

__version__ = "0.1"

__all__ = [
    "SIGNATURE",
    "REV_1",
    "REV_2",
    "REV_3",
    "HEADER_SIZE_BASE",
    "HEADER_SIZE_V1",
    "BlockFileError",
    "BlockIOError",
    "FormatError",
    "ConfigError",
    "UnimplementedRevision",
    "MisalignedBlockArea",
    "AlreadyClosed",
    "BlockFile",
    "BlockFileV1",
    "LockedBlockFile",
    "create_container",
    "open_container",
    "register_revision",
    "implemented_revisions",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
