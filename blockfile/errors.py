class BlockFileError(Exception):
    """Base class for blockfile-specific errors."""


# I/O
class BlockIOError(BlockFileError, OSError):
    """Short or failed read/write, or the file could not be opened/stat'ed."""


# Header/format
class FormatError(BlockFileError, ValueError):
    pass


class UnimplementedRevision(BlockFileError, NotImplementedError):
    """Revision is part of the format but this build cannot serve it."""

    def __init__(self, revision: int):
        super().__init__(f"revision {revision} not implemented")
        self.revision = revision


# Caller-supplied parameters
class ConfigError(BlockFileError, ValueError):
    pass


# Handle state
class MisalignedBlockArea(BlockFileError):
    """Block area is not a whole number of blocks.

    ``count`` is the number of complete blocks, so callers may keep reading
    the container in a degraded mode.
    """

    def __init__(self, count: int, remainder: int):
        super().__init__(
            f"block area is not a whole number of blocks; "
            f"{count} blocks + {remainder} trailing bytes"
        )
        self.count = count
        self.remainder = remainder


class AlreadyClosed(BlockFileError):
    pass
