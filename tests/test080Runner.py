# ext-specimens
# Copyright (C) 2025 Red Hat Inc.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA 02110-1301 USA.

# Whole runs with a recording backend.

import contextlib
import io
import os
import tempfile
import unittest
from pathlib import Path

from ext_specimens.config import Config
from ext_specimens.errors import (
    ConfigurationError,
    EntityError,
    OutputExistsError,
    ToolchainError,
)
from ext_specimens.runner import describe, generate, load_jobs
from .tests_helper import *


class Test080Runner(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.out = Path(self.tmp.name) / "specimens" / "mke2fs"
        self.backend = RecordingBackend()

    def tearDown(self):
        self.tmp.cleanup()

    def config(self, **kwargs):
        kwargs.setdefault("privilege_command", ())
        return Config(self.out, **kwargs)

    def test_single_specimen(self):
        artifacts = generate(self.config(only=("ext2_block_1024",)),
                             self.backend)
        self.assertEqual(artifacts, [self.out / "ext2_block_1024.raw"])
        self.assertEqual(os.path.getsize(artifacts[0]), 4096 * 1024)
        self.assertEqual(os.listdir(self.out), ["ext2_block_1024.raw"])
        self.assertEqual(self.backend.events, [
            ("format", "ext2_block_1024"),
            ("mount", "ext2_block_1024.raw-t"),
            ("unmount", "ext2_block_1024.raw-t"),
        ])
        session = self.backend.sessions["ext2_block_1024.raw-t"]
        self.assertEqual(len(session.order), 19)
        self.assertEqual(session.mount_point, "/mnt/ext")

    def test_sessions_do_not_overlap(self):
        generate(self.config(only=("ext2_block_*",)), self.backend)
        kinds = [e[0] for e in self.backend.events]
        self.assertEqual(kinds, ["format", "mount", "unmount"] * 3)
        self.assertEqual(sorted(os.listdir(self.out)), [
            "ext2_block_1024.raw", "ext2_block_2048.raw",
            "ext2_block_4096.raw",
        ])

    def test_steps(self):
        generate(self.config(only=("ext4_with_ea_inode", "ext2_100_files",
                                   "ext3_sparse")), self.backend)
        ea = self.backend.sessions["ext4_with_ea_inode.raw-t"]
        self.assertEqual(
            len(ea.get_xattr("testdir1/large_xattr", "user.mylargexattr")),
            8192)
        many = self.backend.sessions["ext2_100_files.raw-t"]
        self.assertEqual(len(many.order), 19 + 100)
        sparse = self.backend.sessions["ext3_sparse.raw-t"]
        self.assertEqual([k for k in sparse.order],
                         [b"sparse_256k", b"sparse_64m", b"sparse_16g"])

    def test_encrypted(self):
        generate(self.config(matrices=("encrypted",)), self.backend)
        session = self.backend.sessions["ext4_with_encrypted_files.raw-t"]
        self.assertEqual(session.node("encrypteddir1")["policy"],
                         "69ca01c4b1b8ad98")

    def test_failure_stops_run(self):
        class Failing(RecordingBackend):
            def mount(self, store, mount_point):
                session = super().mount(store, mount_point)
                if store.path.name.startswith("ext2_block_2048"):
                    session.mkdir("emptyfile")
                return session

        backend = Failing()
        with self.assertRaises(EntityError):
            generate(self.config(only=("ext2_block_*",)), backend)
        self.assertEqual(backend.events[-1],
                         ("unmount", "ext2_block_2048.raw-t"))
        self.assertNotIn(("format", "ext2_block_4096"), backend.events)
        self.assertEqual(sorted(os.listdir(self.out)), [
            "ext2_block_1024.raw", "ext2_block_2048.raw-t",
        ])

    def test_output_exists(self):
        self.out.mkdir(parents=True)
        with self.assertRaises(OutputExistsError) as cm:
            generate(self.config(only=("ext2",)), self.backend)
        self.assertEqual(str(cm.exception),
                         "Specimens directory: %s already exists." % self.out)
        self.assertEqual(self.backend.events, [])

    def test_missing_tool(self):
        backend = RecordingBackend(tools=["no-such-tool-for-specimens"])
        self.assertRaises(ToolchainError, generate,
                          self.config(only=("ext2",)), backend)
        self.assertFalse(self.out.exists())

    def test_missing_unicode_data(self):
        config = self.config(matrices=("unicode",),
                             unicode_data=Path(self.tmp.name) / "none.txt")
        self.assertRaises(ConfigurationError, generate, config, self.backend)
        self.assertFalse(self.out.exists())

    def test_unicode(self):
        data = Path(self.tmp.name) / "UnicodeData.txt"
        data.write_text("0000;<control>;Cc;0;BN;;;;;N;NULL;;;;\n"
                        "0041;LATIN CAPITAL LETTER A;Lu;0;L;;;;;N;;;;0061;\n",
                        encoding="utf-8")
        with self.assertLogs(level="WARNING"):
            artifacts = generate(self.config(matrices=("unicode",),
                                             unicode_data=data),
                                 self.backend)
        self.assertEqual(artifacts, [self.out / "ext2_unicode_files.raw"])
        session = self.backend.sessions["ext2_unicode_files.raw-t"]
        self.assertEqual(session.order, [b"testdir1",
                                         b"testdir1/unicode_U+00000041_A"])

    def test_short_payload(self):
        payload = Path(self.tmp.name) / "payload"
        payload.write_bytes(b"x")
        config = self.config(only=("ext4_with_ea_inode",), payload=payload)
        self.assertRaises(ConfigurationError, generate, config, self.backend)
        self.assertFalse(self.out.exists())
        self.assertEqual(self.backend.events, [])

    def test_dry_run(self):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            result = generate(self.config(only=("ext2_block_1024",),
                                          dry_run=True), self.backend)
        self.assertEqual(result, [])
        self.assertEqual(stdout.getvalue(),
                         "ext2_block_1024.raw: 4194304 bytes, mke2fs -t ext2 "
                         "-L ext2_test -b 1024, steps catalog\n")
        self.assertFalse(self.out.exists())
        self.assertEqual(self.backend.events, [])

    def test_load_jobs(self):
        jobs = load_jobs(self.config(matrices=("standard", "encrypted")))
        self.assertEqual(len(jobs), 56)
        self.assertEqual(jobs[-1].name, "ext4_with_encrypted_files")
        self.assertIn("steps catalog,encrypted", describe(jobs[-1]))
        self.assertRaises(ConfigurationError, load_jobs,
                          self.config(matrices=("nope",)))
        self.assertRaises(ConfigurationError, load_jobs,
                          self.config(only=("nothing*",)))


if __name__ == "__main__":
    unittest.main()
