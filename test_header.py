from __future__ import annotations

import struct
import tempfile
import unittest
from pathlib import Path

from blockfile.constants import SIGNATURE, HEADER_SIZE_BASE, HEADER_SIZE_V1
from blockfile.errors import BlockIOError, FormatError
from blockfile.header import (
    encode_header,
    encode_v1_header,
    decode_base_header,
    decode_v1_extension,
    probe,
    is_blockfile,
)


class HeaderCodecTests(unittest.TestCase):
    def test_v1_header_layout(self):
        raw = encode_v1_header(64)
        self.assertEqual(len(raw), HEADER_SIZE_V1)
        self.assertEqual(raw, bytes([0xB1, 0x0C, 0xF1, 0x1E, 0x01, 0x00, 0x00, 0x00, 0x40]))

    def test_encode_header_appends_extension_without_padding(self):
        raw = encode_header(3, b"\xAA\xBB")
        self.assertEqual(raw[:4], struct.pack(">I", SIGNATURE))
        self.assertEqual(raw[4], 3)
        self.assertEqual(raw[5:], b"\xAA\xBB")

    def test_decode_base_header(self):
        base = decode_base_header(encode_v1_header(4096))
        self.assertEqual(base.signature, SIGNATURE)
        self.assertEqual(base.revision, 1)
        self.assertEqual(decode_v1_extension(encode_v1_header(4096)[HEADER_SIZE_BASE:]), 4096)

    def test_short_buffer_is_io_error(self):
        with self.assertRaises(BlockIOError):
            decode_base_header(b"\xB1\x0C\xF1")
        with self.assertRaises(BlockIOError):
            decode_v1_extension(b"\x00\x01")

    def test_bad_signature(self):
        with self.assertRaises(FormatError) as ctx:
            decode_base_header(b"\xDE\xAD\xBE\xEF\x01")
        self.assertIn("bad signature", str(ctx.exception))

    def test_unsupported_revisions(self):
        for rev in (0, 4, 255):
            with self.assertRaises(FormatError) as ctx:
                decode_base_header(encode_header(rev))
            self.assertIn("unsupported revision", str(ctx.exception))

    def test_reserved_revisions_decode(self):
        # Reserved revisions are valid headers; refusing them is the dispatcher's job.
        for rev in (2, 3):
            self.assertEqual(decode_base_header(encode_header(rev)).revision, rev)


class ProbeTests(unittest.TestCase):
    def run_with_tmpdir(self, func):
        with tempfile.TemporaryDirectory() as tmp:
            func(Path(tmp))

    def test_probe_and_is_blockfile(self):
        def scenario(tmp_path: Path):
            good = tmp_path / "good.bf"
            good.write_bytes(encode_v1_header(512))
            other = tmp_path / "other.bin"
            other.write_bytes(b"PK\x03\x04 not a container")
            empty = tmp_path / "empty.bin"
            empty.write_bytes(b"")

            self.assertEqual(probe(good).revision, 1)
            self.assertTrue(is_blockfile(good))
            self.assertFalse(is_blockfile(other))
            self.assertFalse(is_blockfile(empty))
            self.assertFalse(is_blockfile(tmp_path / "missing.bf"))
            with self.assertRaises(FormatError):
                probe(other)
            with self.assertRaises(BlockIOError):
                probe(empty)
            with self.assertRaises(BlockIOError):
                probe(tmp_path / "missing.bf")

        self.run_with_tmpdir(scenario)


if __name__ == "__main__":
    unittest.main()
