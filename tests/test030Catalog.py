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

# The entity catalog and its variants.

import unittest

from ext_specimens.errors import EntityError, PopulateError
from ext_specimens.payload import default_payload
from ext_specimens.populators.catalog import (
    ENCRYPTED_ENTITIES,
    LARGE_XATTR_SIZE,
    NORMALIZATION_NAMES,
    EntityKind,
    FileEntityDescriptor,
    build_catalog,
    populate_catalog,
    populate_encrypted,
    populate_entities,
    populate_large_xattr,
)
from .tests_helper import *

MiB = 1024 * 1024


class Test030Catalog(unittest.TestCase):
    def setUp(self):
        self.payload = default_payload()
        self.session = RecordingSession()
        self.created = set()
        self.done = populate_catalog(self.session, self.payload, self.created)

    def test_entity_count(self):
        self.assertEqual(len(self.done), 19)
        plain = [e for e in self.done
                 if e.relative_path not in NORMALIZATION_NAMES]
        self.assertEqual(len(plain), 15)
        self.assertEqual(len(self.created), 19)

    def test_order(self):
        paths = [e.relative_path for e in self.done]
        self.assertEqual(paths[:7], [
            "emptyfile", "testdir1", "testdir1/testfile1",
            "testdir1/TestFile2", "file_hardlink1", "file_symboliclink1",
            "directory_symboliclink1",
        ])
        self.assertEqual(paths[7:11], list(NORMALIZATION_NAMES))
        self.assertEqual(paths[-1], "testdir1/pipe1")
        self.assertEqual(self.session.order, [os_key(p) for p in paths])

    def test_files(self):
        s = self.session
        self.assertEqual(s.content("emptyfile"), b"")
        self.assertEqual(s.content("testdir1/testfile1"), b"My file\n")
        self.assertEqual(s.content("testdir1/TestFile2"), self.payload)
        self.assertIs(s.node("file_hardlink1"), s.node("testdir1/testfile1"))

    def test_symlinks(self):
        self.assertEqual(self.session.node("file_symboliclink1")["target"],
                         "/mnt/ext/testdir1/testfile1")
        self.assertEqual(
            self.session.node("directory_symboliclink1")["target"],
            "/mnt/ext/testdir1")

    def test_normalization_names_untouched(self):
        for name in NORMALIZATION_NAMES:
            self.assertIn(name, self.session.nodes)
        self.assertIn("nfc_téstfilè".encode("utf-8"), self.session.nodes)
        self.assertNotIn("nfc_téstfilè".encode("utf-8").replace(
            b"\xc3\xa9", b"e\xcc\x81"), self.session.nodes)

    def test_xattrs(self):
        s = self.session
        self.assertEqual(s.node("testdir1/xattr1")["type"], "file")
        self.assertEqual(s.get_xattr("testdir1/xattr1", "user.myxattr1"),
                         b"My 1st extended attribute")
        self.assertEqual(s.node("testdir1/xattr2")["type"], "dir")
        self.assertEqual(s.get_xattr("testdir1/xattr2", "user.myxattr2"),
                         b"My 2nd extended attribute")

    def test_sparse_files(self):
        s = self.session
        line = b"File with an initial sparse extent\n"
        self.assertEqual(s.apparent_size("testdir1/initial_sparse1"),
                         MiB + len(line))
        self.assertEqual(s.content("testdir1/initial_sparse1")[MiB:], line)

        line = b"File with a trailing sparse extent\n"
        self.assertEqual(s.apparent_size("testdir1/trailing_sparse1"), MiB)
        self.assertTrue(
            s.content("testdir1/trailing_sparse1").startswith(line))

        node = s.node("testdir1/uninitialized1")
        self.assertEqual(node["unwritten"], 4096)
        self.assertEqual(node["size"],
                         4096 + len(b"File with an uninitialized extent\n"))

    def test_special_files(self):
        s = self.session
        self.assertEqual(s.node("testdir1/blockdev1"),
                         {"type": "device-b", "device": (24, 57),
                          "xattrs": {}})
        self.assertEqual(s.node("testdir1/chardev1")["device"], (13, 68))
        self.assertEqual(s.node("testdir1/pipe1")["type"], "fifo")

    def test_catalog_is_stable(self):
        self.assertEqual(build_catalog("/mnt/ext", self.payload),
                         build_catalog("/mnt/ext", self.payload))


def os_key(path):
    return path.encode("utf-8") if isinstance(path, str) else path


class Test030Preconditions(unittest.TestCase):
    def test_hardlink_before_target(self):
        session = RecordingSession()
        entity = FileEntityDescriptor("link", EntityKind.HARDLINK,
                                      target="testdir1/testfile1",
                                      requires=("testdir1/testfile1",))
        with self.assertRaises(PopulateError):
            populate_entities(session, [entity], set())
        self.assertEqual(session.order, [])

    def test_failure_propagates(self):
        session = RecordingSession()
        session.mkdir("emptyfile")
        self.assertRaises(EntityError, populate_catalog, session,
                          default_payload(), set())

    def test_xattr_mismatch(self):
        class Corrupting(RecordingSession):
            def get_xattr(self, path, name):
                return b"something else"

        self.assertRaises(PopulateError, populate_catalog, Corrupting(),
                          default_payload(), set())


class Test030Variants(unittest.TestCase):
    def setUp(self):
        self.session = RecordingSession()
        self.created = set()
        populate_catalog(self.session, default_payload(), self.created)

    def test_large_xattr(self):
        payload = default_payload()
        populate_large_xattr(self.session, payload, self.created)
        value = self.session.get_xattr("testdir1/large_xattr",
                                       "user.mylargexattr")
        self.assertEqual(len(value), LARGE_XATTR_SIZE)
        self.assertEqual(value, payload[:LARGE_XATTR_SIZE])

    def test_large_xattr_short_payload(self):
        self.assertRaises(PopulateError, populate_large_xattr, self.session,
                          b"tiny", self.created)
        self.assertNotIn(b"testdir1/large_xattr", self.session.nodes)

    def test_large_xattr_needs_testdir(self):
        self.assertRaises(PopulateError, populate_large_xattr,
                          RecordingSession(), default_payload(), set())

    def test_encrypted(self):
        done = populate_encrypted(self.session, self.created)
        self.assertEqual(done, list(ENCRYPTED_ENTITIES))
        self.assertEqual(self.session.keys_added, 1)
        self.assertEqual(self.session.node("encrypteddir1")["policy"],
                         "69ca01c4b1b8ad98")
        self.assertEqual(
            self.session.content("encrypteddir1/encryptedfile1"),
            b"Super secret\n")

    def test_encrypted_without_key(self):
        self.session.available_policy = None
        self.assertRaises(EntityError, populate_encrypted, self.session,
                          self.created)
        self.assertNotIn(b"encrypteddir1", self.session.nodes)


if __name__ == "__main__":
    unittest.main()
