from __future__ import annotations

import sys
import argparse
import logging
import json as _json

from pathlib import Path
from typing import List, Optional, Dict, Any

from blockfile.constants import DEFAULT_BLOCK_SIZE, DEFAULT_REVISION, KNOWN_REVISIONS
from blockfile.dispatch import create_container, open_container
from blockfile.header import probe
from blockfile.errors import BlockFileError, MisalignedBlockArea


def _block_count(bf) -> tuple[int, int]:
    """Return (whole blocks, trailing bytes) without raising on misalignment."""
    try:
        return bf.num_blocks(), 0
    except MisalignedBlockArea as exc:
        return exc.count, exc.remainder


def cmd_create(path: str, block_size: int = DEFAULT_BLOCK_SIZE, revision: int = DEFAULT_REVISION) -> None:
    """Create an empty container.

    Args:
        path: Destination path; must not exist yet.
        block_size: Size in bytes of every block.
        revision: Format revision to write.
    """
    with create_container(path, revision, block_size) as bf:
        print(f"Created {bf.file_name} (revision {bf.revision}, block size {bf.block_size})")


def cmd_info(path: str) -> bool:
    """Print header fields and block count.

    Args:
        path: Container path.

    Returns:
        True when the block area is aligned.
    """
    with open_container(path) as bf:
        count, trailing = _block_count(bf)
        print(f"Container: {bf.file_name}")
        print(f"  Revision: {bf.revision}")
        print(f"  Block size: {bf.block_size}")
        print(f"  Header size: {bf.header_size}")
        print(f"  Blocks: {count}")
        if trailing:
            print(f"  Trailing bytes: {trailing} (misaligned)")
    return trailing == 0


def cmd_read(path: str, index: int, output: Optional[str] = None, as_hex: bool = False) -> None:
    """Dump one block.

    Args:
        path: Container path.
        index: Block index.
        output: Write the raw block here instead of stdout.
        as_hex: Print the block as hex text.
    """
    with open_container(path) as bf:
        data = bf.read_block(index)
    if output:
        Path(output).write_bytes(data)
    elif as_hex:
        print(data.hex())
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()


def cmd_write(path: str, index: int, data: bytes) -> int:
    """Write one block; short payloads are zero padded, long ones truncated.

    Returns:
        Number of bytes written.
    """
    with open_container(path) as bf:
        n = bf.write_block(data, index)
    print(f"Wrote {n} bytes to block {index}")
    return n


def cmd_verify(path: str, as_json: bool = False) -> bool:
    """Validate the header, alignment, and readability of every whole block.

    Args:
        path: Container path.
        as_json: Emit a JSON summary instead of text.

    Returns:
        True if the container is healthy.
    """
    result: Dict[str, Any] = {"path": path, "ok": False}
    base = probe(path)
    result["revision"] = base.revision
    with open_container(path) as bf:
        count, trailing = _block_count(bf)
        result.update(block_size=bf.block_size, blocks=count, trailing_bytes=trailing)
        # Raises BlockIOError on the first unreadable block.
        for _index, _data in bf.iter_blocks():
            pass
    result["ok"] = trailing == 0
    if as_json:
        print(_json.dumps(result, indent=2))
    elif result["ok"]:
        print(f"OK: {path} ({count} blocks of {result['block_size']} bytes)")
    else:
        print(f"MISALIGNED: {path} ({count} blocks + {trailing} trailing bytes)")
    return result["ok"]


def _read_payload(args: argparse.Namespace) -> bytes:
    if args.data is not None:
        return args.data.encode("utf-8")
    if args.input:
        return Path(args.input).read_bytes()
    return sys.stdin.buffer.read()


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="blockfile",
        description="Block container tool",
        epilog="Blocks are addressed by zero-based index; offsets are header size + index * block size.",
    )
    ap.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_create = sub.add_parser("create", help="Create an empty container")
    ap_create.add_argument("path", help="Container path (must not exist)")
    ap_create.add_argument("--block-size", type=int, default=DEFAULT_BLOCK_SIZE, help=f"Block size in bytes (default {DEFAULT_BLOCK_SIZE})")
    ap_create.add_argument("--revision", type=int, default=DEFAULT_REVISION, help=f"Format revision (known: {', '.join(map(str, KNOWN_REVISIONS))})")

    ap_info = sub.add_parser("info", help="Show container information")
    ap_info.add_argument("path", help="Container path")

    ap_read = sub.add_parser("read", help="Read one block")
    ap_read.add_argument("path", help="Container path")
    ap_read.add_argument("index", type=int, help="Block index")
    ap_read.add_argument("--output", "-o", help="Write block to this file")
    ap_read.add_argument("--hex", action="store_true", help="Print block as hex")

    ap_write = sub.add_parser("write", help="Write one block (payload from --data, --input, or stdin)")
    ap_write.add_argument("path", help="Container path")
    ap_write.add_argument("index", type=int, help="Block index")
    src = ap_write.add_mutually_exclusive_group()
    src.add_argument("--input", "-i", help="Read payload from this file")
    src.add_argument("--data", help="Use this UTF-8 text as payload")

    ap_verify = sub.add_parser("verify", help="Check header, alignment and block readability")
    ap_verify.add_argument("path", help="Container path")
    ap_verify.add_argument("--json", action="store_true", help="Emit JSON result summary")

    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        if args.cmd == "create":
            cmd_create(args.path, block_size=args.block_size, revision=args.revision)
        elif args.cmd == "info":
            cmd_info(args.path)
        elif args.cmd == "read":
            cmd_read(args.path, args.index, output=args.output, as_hex=args.hex)
        elif args.cmd == "write":
            cmd_write(args.path, args.index, _read_payload(args))
        elif args.cmd == "verify":
            success = cmd_verify(args.path, as_json=args.json)
            sys.exit(0 if success else 1)
        else:
            raise RuntimeError("Unknown command")
    except BlockFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
