# Magic and revisions
SIGNATURE = 0xB10CF11E              # 4 bytes, big-endian, shared by all revisions

REV_1 = 1
REV_2 = 2
REV_3 = 3

# Every revision the format knows about, implemented or not.
KNOWN_REVISIONS = (REV_1, REV_2, REV_3)

# Header sizes
HEADER_SIZE_BASE = 5                # signature u32 + revision u8
HEADER_SIZE_V1 = HEADER_SIZE_BASE + 4  # + block_size u32

MAX_BLOCK_SIZE = 0xFFFFFFFF

DEFAULT_BLOCK_SIZE = 4096
DEFAULT_REVISION = REV_1
