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

# Expansion of the job tables.

import unittest

from ext_specimens.errors import MatrixError
from ext_specimens.matrix import (
    DEFAULT_IMAGE_SIZE,
    FeatureToggle,
    FilesystemKind,
    Populator,
    SizeClass,
    SpecimenDefinition,
    SpecimenJob,
    expand,
    parse_features,
    select,
)
from ext_specimens.tables import (
    ENCRYPTED_MATRIX,
    MATRICES,
    STANDARD_MATRIX,
    UNICODE_MATRIX,
)
from .tests_helper import *


class Test010Features(unittest.TestCase):
    def test_parse(self):
        self.assertEqual(parse_features("^has_journal,dir_index"),
                         (FeatureToggle("has_journal", False),
                          FeatureToggle("dir_index", True)))
        self.assertEqual(parse_features(""), ())

    def test_str(self):
        self.assertEqual(str(FeatureToggle("filetype", False)), "^filetype")
        self.assertEqual(str(FeatureToggle("64bit")), "64bit")

    def test_repeat_collapses(self):
        self.assertEqual(parse_features("dir_index,dir_index"),
                         (FeatureToggle("dir_index"),))

    def test_contradiction(self):
        self.assertRaises(MatrixError, parse_features, "dir_index,^dir_index")

    def test_empty_name(self):
        self.assertRaises(MatrixError, parse_features, "^")


class Test010Job(unittest.TestCase):
    def test_defaults(self):
        job = SpecimenJob("ext2", FilesystemKind.EXT2, "ext2_test")
        self.assertEqual(job.total_size, 4 * 1024 * 1024)
        self.assertEqual(job.sector_size, 512)
        self.assertEqual(job.artifact_name, "ext2.raw")
        self.assertIsNone(job.feature_string)
        self.assertEqual(job.populators, (Populator.CATALOG,))

    def test_sector_multiple(self):
        self.assertRaises(MatrixError, SpecimenJob, "x", FilesystemKind.EXT2,
                          "x", total_size=1000)
        self.assertRaises(MatrixError, SpecimenJob, "x", FilesystemKind.EXT2,
                          "x", total_size=0)

    def test_duplicate_toggles(self):
        self.assertRaises(MatrixError, SpecimenJob, "x", FilesystemKind.EXT4,
                          "x", features=(FeatureToggle("a"),
                                         FeatureToggle("a", False)))

    def test_many_files_needs_count(self):
        self.assertRaises(MatrixError, SpecimenJob, "x", FilesystemKind.EXT4,
                          "x", populators=(Populator.MANY_FILES,))

    def test_formatter_options(self):
        job = SpecimenJob("ext4_with_block_groups", FilesystemKind.EXT4,
                          "ext4_test", block_size=4096, inode_size=256,
                          features=parse_features("^has_journal,flex_bg"),
                          flex_bg_size=4)
        self.assertEqual(job.formatter_options(),
                         ["-t", "ext4", "-L", "ext4_test", "-b", "4096",
                          "-I", "256", "-O", "^has_journal,flex_bg",
                          "-G", "4"])


class Test010Expand(unittest.TestCase):
    def test_product_order(self):
        d = SpecimenDefinition("{kind}_b{block_size}_i{inode_size}",
                               (FilesystemKind.EXT2, FilesystemKind.EXT3),
                               block_sizes=(1024, 2048),
                               inode_sizes=(128, 256))
        names = [job.name for job in expand([d])]
        self.assertEqual(names, [
            "ext2_b1024_i128", "ext2_b1024_i256",
            "ext2_b2048_i128", "ext2_b2048_i256",
            "ext3_b1024_i128", "ext3_b1024_i256",
            "ext3_b2048_i128", "ext3_b2048_i256",
        ])

    def test_deterministic(self):
        self.assertEqual(expand(STANDARD_MATRIX), expand(STANDARD_MATRIX))

    def test_duplicate_name(self):
        d = SpecimenDefinition("same", (FilesystemKind.EXT2,
                                        FilesystemKind.EXT3))
        self.assertRaises(MatrixError, expand, [d])

    def test_bad_template(self):
        d = SpecimenDefinition("{kind}_{nope}", (FilesystemKind.EXT2,))
        self.assertRaises(MatrixError, expand, [d])

    def test_no_kind(self):
        self.assertRaises(MatrixError, expand, [SpecimenDefinition("x", ())])

    def test_size_class(self):
        d = SpecimenDefinition(
            "{kind}_{file_count}_files", (FilesystemKind.EXT4,),
            size_classes=(SizeClass(1024 * 1024, file_count=100),),
            populators=(Populator.CATALOG, Populator.MANY_FILES))
        job, = expand([d])
        self.assertEqual(job.name, "ext4_100_files")
        self.assertEqual(job.total_size, 1024 * 1024)
        self.assertEqual(job.file_count, 100)

    def test_select(self):
        jobs = expand(STANDARD_MATRIX)
        picked = select(jobs, ["ext2_block_*", "ext4_sparse"])
        self.assertEqual([j.name for j in picked],
                         ["ext2_block_1024", "ext2_block_2048",
                          "ext2_block_4096", "ext4_sparse"])
        self.assertEqual(select(jobs, []), jobs)
        self.assertEqual(select(jobs, ["nothing*"]), [])


class Test010Tables(unittest.TestCase):
    def setUp(self):
        self.jobs = {job.name: job for job in expand(STANDARD_MATRIX)}

    def test_counts(self):
        self.assertEqual(len(self.jobs), 55)
        self.assertEqual(len(expand(ENCRYPTED_MATRIX)), 1)
        self.assertEqual(len(expand(UNICODE_MATRIX)), 1)

    def test_all_matrices_expand_together(self):
        names = [j.name for name in MATRICES for j in expand(MATRICES[name])]
        self.assertEqual(len(names), len(set(names)))

    def test_ext2_block_1024(self):
        job = self.jobs["ext2_block_1024"]
        self.assertEqual(job.total_size, DEFAULT_IMAGE_SIZE)
        self.assertEqual(job.sector_size, 512)
        self.assertEqual(job.formatter_options(),
                         ["-t", "ext2", "-L", "ext2_test", "-b", "1024"])
        self.assertEqual(job.populators, (Populator.CATALOG,))

    def test_inode_rows_disable_journal(self):
        job = self.jobs["ext3_inode_512"]
        self.assertEqual(job.formatter_options(),
                         ["-t", "ext3", "-L", "ext3_test", "-I", "512",
                          "-O", "^has_journal"])

    def test_journal_rows(self):
        self.assertIsNone(self.jobs["ext4_with_journal"].feature_string)
        self.assertEqual(self.jobs["ext4"].feature_string, "^has_journal")

    def test_inline_data(self):
        self.assertEqual(self.jobs["ext4_with_inline_data"].inode_size, 256)

    def test_ea_inode(self):
        self.assertTrue(
            self.jobs["ext4_with_ea_inode"].needs(Populator.LARGE_XATTR))

    def test_many_files(self):
        job = self.jobs["ext3_100000_files"]
        self.assertEqual(job.file_count, 100000)
        self.assertEqual(job.total_size, 2048 * 1024 * 1024)
        self.assertEqual(job.populators,
                         (Populator.CATALOG, Populator.MANY_FILES))

    def test_sparse(self):
        job = self.jobs["ext2_sparse"]
        self.assertEqual(job.block_size, 1024)
        self.assertEqual(job.total_size, 1024 * 1024)
        self.assertEqual(job.populators, (Populator.SPARSE,))
        huge = self.jobs["ext4_huge_file_sparse"]
        self.assertEqual(huge.block_size, 4096)
        self.assertIn("huge_file", huge.feature_string)


if __name__ == "__main__":
    unittest.main()
