from __future__ import annotations

import tempfile
import threading
import unittest
from pathlib import Path

from blockfile import REV_1, LockedBlockFile, AlreadyClosed, create_container, open_container


class LockedBlockFileTests(unittest.TestCase):
    def run_with_tmpdir(self, func):
        with tempfile.TemporaryDirectory() as tmp:
            func(Path(tmp))

    def test_concurrent_writers_and_readers(self):
        def scenario(tmp_path: Path):
            p = tmp_path / "shared.bf"
            block_size = 128
            per_thread = 25
            n_threads = 4
            errors = []

            with LockedBlockFile(create_container(p, REV_1, block_size)) as bf:
                def writer(tid: int):
                    try:
                        for j in range(per_thread):
                            idx = tid * per_thread + j
                            bf.write_block(idx.to_bytes(4, "big"), idx)
                            bf.num_blocks()
                    except Exception as exc:  # surfaced through the errors list
                        errors.append(exc)

                threads = [threading.Thread(target=writer, args=(t,)) for t in range(n_threads)]
                for t in threads:
                    t.start()
                for t in threads:
                    t.join()

                self.assertEqual(errors, [])
                self.assertEqual(bf.num_blocks(), n_threads * per_thread)

            with open_container(p) as bf:
                for idx, data in bf.iter_blocks():
                    self.assertEqual(int.from_bytes(data[:4], "big"), idx)

        self.run_with_tmpdir(scenario)

    def test_wrapper_delegates_metadata_and_close(self):
        def scenario(tmp_path: Path):
            inner = create_container(tmp_path / "m.bf", REV_1, 32)
            bf = LockedBlockFile(inner)
            self.assertIs(bf.inner, inner)
            self.assertEqual(bf.block_size, 32)
            self.assertEqual(bf.revision, REV_1)
            self.assertEqual(bf.header_size, inner.header_size)
            self.assertEqual(bf.file_name, inner.file_name)
            bf.write_block(b"a", 0)
            self.assertEqual(list(bf.iter_blocks()), [(0, b"a" + b"\x00" * 31)])
            bf.close()
            self.assertTrue(inner.closed)
            with self.assertRaises(AlreadyClosed):
                bf.close()

        self.run_with_tmpdir(scenario)

    def test_iter_blocks_is_lazy(self):
        def scenario(tmp_path: Path):
            with LockedBlockFile(create_container(tmp_path / "lazy.bf", REV_1, 8)) as bf:
                for i in range(3):
                    bf.write_block(b"old", i)
                it = bf.iter_blocks()
                self.assertEqual(next(it), (0, b"old" + b"\x00" * 5))
                # Blocks not yet yielded are read after this write lands.
                bf.write_block(b"new", 1)
                self.assertEqual(next(it), (1, b"new" + b"\x00" * 5))

                # The lock is free between steps: another thread can write mid-scan.
                done = threading.Event()
                t = threading.Thread(target=lambda: (bf.write_block(b"thread", 2), done.set()))
                t.start()
                t.join(timeout=5)
                self.assertTrue(done.is_set())
                self.assertEqual(next(it), (2, b"thread" + b"\x00" * 2))
                with self.assertRaises(StopIteration):
                    next(it)

        self.run_with_tmpdir(scenario)

    def test_wrapper_cannot_create_files(self):
        with self.assertRaises(TypeError):
            LockedBlockFile.create("x.bf", 16)
        with self.assertRaises(TypeError):
            LockedBlockFile.open("x.bf")


if __name__ == "__main__":
    unittest.main()
