"""
Revision dispatch: the single place that maps a revision tag to an engine.

Every revision the format reserves has an entry. Implemented entries carry
the engine class; reserved ones carry ``None`` and are refused with
``UnimplementedRevision``, which lets callers tell "this build can't read it"
apart from "this isn't a revision at all" (``FormatError``).

Shipping a new revision means writing its engine and registering it here.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Type, Union

from .base import BlockFile
from .constants import REV_1, REV_2, REV_3, HEADER_SIZE_BASE
from .errors import BlockIOError, FormatError, UnimplementedRevision
from .header import decode_base_header, read_exact
from .v1 import BlockFileV1


logger = logging.getLogger(__name__)


_ENGINES: Dict[int, Optional[Type[BlockFile]]] = {
    REV_1: BlockFileV1,
    REV_2: None,
    REV_3: None,
}


def register_revision(revision: int, engine: Optional[Type[BlockFile]]) -> None:
    """Install (or withdraw, with ``None``) the engine serving ``revision``."""
    if revision not in _ENGINES:
        raise FormatError(f"unsupported revision: {revision}")
    _ENGINES[revision] = engine


def implemented_revisions() -> List[int]:
    return sorted(rev for rev, engine in _ENGINES.items() if engine is not None)


def engine_for(revision: int) -> Type[BlockFile]:
    if revision not in _ENGINES:
        raise FormatError(f"unsupported revision: {revision}")
    engine = _ENGINES[revision]
    if engine is None:
        raise UnimplementedRevision(revision)
    return engine


def create_container(path: Union[str, Path], revision: int, block_size: int) -> BlockFile:
    """Create a new container of the given revision at ``path``."""
    logger.debug("create_container: path=%s revision=%s block_size=%s", path, revision, block_size)
    engine = engine_for(revision)
    return engine.create(path, block_size)


def open_container(path: Union[str, Path]) -> BlockFile:
    """Open an existing container, choosing the engine from its header."""
    path = os.fspath(path)
    try:
        with open(path, "rb") as f:
            raw = read_exact(f, HEADER_SIZE_BASE, "base header")
    except FileNotFoundError as exc:
        raise BlockIOError(f"not found: {path}") from exc
    except BlockIOError:
        raise
    except OSError as exc:
        raise BlockIOError(f"failed to open {path}: {exc}") from exc

    base = decode_base_header(raw)
    logger.debug("open_container: path=%s revision=%d", path, base.revision)
    engine = engine_for(base.revision)
    return engine.open(path)
