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

"""
The job tables.

This is the file to edit when a new specimen is wanted.  Rows are
expanded in the order written here, and the resulting image names,
sizes and formatter options are part of the test contract of the
downstream parser: do NOT change existing rows lightly, add new ones.
"""

from __future__ import annotations

from .matrix import (
    FilesystemKind,
    Populator,
    SizeClass,
    SpecimenDefinition,
)

EXT2 = (FilesystemKind.EXT2,)
EXT3 = (FilesystemKind.EXT3,)
EXT4 = (FilesystemKind.EXT4,)
ALL_KINDS = EXT2 + EXT3 + EXT4

# A block size of 8192 is only available on some architectures.
BLOCK_SIZES = (1024, 2048, 4096)
INODE_SIZES = (128, 256, 512, 1024)

# Images must grow with the number of files so the file system never
# runs out of inodes or directory blocks.
MANY_FILES_SIZE_CLASSES = (
    SizeClass(1 * 1024 * 1024, file_count=100),
    SizeClass(8 * 1024 * 1024, file_count=1000),
    SizeClass(64 * 1024 * 1024, file_count=10000),
    SizeClass(2048 * 1024 * 1024, file_count=100000),
)

SPARSE_IMAGE_SIZE = 1 * 1024 * 1024
UNICODE_IMAGE_SIZE = 32 * 1024 * 1024


def _kind_rows(kinds: tuple[FilesystemKind, ...], journal: str) -> list[SpecimenDefinition]:
    """Plain, per block size and per inode size rows shared by every kind."""
    return [
        SpecimenDefinition("{kind}", kinds, features=journal),
        SpecimenDefinition(
            "{kind}_block_{block_size}", kinds,
            features=journal, block_sizes=BLOCK_SIZES,
        ),
        SpecimenDefinition(
            "{kind}_inode_{inode_size}", kinds,
            features="^has_journal", inode_sizes=INODE_SIZES,
        ),
    ]


STANDARD_MATRIX: tuple[SpecimenDefinition, ...] = (
    # ext2 never has a journal, so the plain and block size rows leave
    # the journal feature alone.
    *_kind_rows(EXT2, ""),
    SpecimenDefinition(
        "ext2_without_filetype", EXT2, features="^filetype,^has_journal",
    ),

    *_kind_rows(EXT3, "^has_journal"),
    SpecimenDefinition(
        "ext3_with_dir_index", EXT3, features="^has_journal,dir_index",
    ),
    SpecimenDefinition("ext3_with_journal", EXT3),
    SpecimenDefinition(
        "ext3_without_filetype", EXT3, features="^filetype,^has_journal",
    ),

    *_kind_rows(EXT4, "^has_journal"),
    SpecimenDefinition(
        "ext4_with_ea_inode", EXT4, features="^has_journal,ea_inode",
        populators=(Populator.CATALOG, Populator.LARGE_XATTR),
    ),
    SpecimenDefinition("ext4_with_64bit", EXT4, features="^has_journal,64bit"),
    SpecimenDefinition(
        "ext4_with_casefold", EXT4, features="^has_journal,casefold",
    ),
    SpecimenDefinition(
        "ext4_with_dir_index", EXT4, features="^has_journal,dir_index",
    ),
    SpecimenDefinition(
        "ext4_with_encrypt", EXT4, features="^has_journal,encrypt",
    ),
    SpecimenDefinition(
        "ext4_with_huge_file", EXT4, features="^has_journal,huge_file",
    ),
    # Inline data needs room in the inode, so ask for 256 byte inodes.
    SpecimenDefinition(
        "ext4_with_inline_data", EXT4, features="^has_journal,inline_data",
        inode_sizes=(256,),
    ),
    SpecimenDefinition("ext4_with_journal", EXT4),
    SpecimenDefinition(
        "ext4_without_filetype", EXT4, features="^filetype,^has_journal",
    ),
    SpecimenDefinition(
        "ext4_with_block_groups", EXT4, features="^has_journal,flex_bg",
        flex_bg_size=4,
    ),
    SpecimenDefinition(
        "ext4_with_metadata_block_group", EXT4,
        features="^has_journal,^resize_inode,meta_bg",
    ),

    SpecimenDefinition(
        "{kind}_{file_count}_files", ALL_KINDS,
        features="^has_journal,dir_index",
        size_classes=MANY_FILES_SIZE_CLASSES,
        populators=(Populator.CATALOG, Populator.MANY_FILES),
    ),

    # 1024 byte blocks keep the indirection tiers small enough to be
    # crossed by files that still fit a 1 MiB image once sparse.
    SpecimenDefinition(
        "{kind}_sparse", ALL_KINDS,
        features="^has_journal,dir_index",
        block_sizes=(1024,),
        size_classes=(SizeClass(SPARSE_IMAGE_SIZE),),
        populators=(Populator.SPARSE,),
    ),
    SpecimenDefinition(
        "ext4_huge_file_sparse", EXT4,
        features="^has_journal,dir_index,huge_file",
        block_sizes=(4096,),
        size_classes=(SizeClass(SPARSE_IMAGE_SIZE),),
        populators=(Populator.HUGE_SPARSE,),
    ),
)

ENCRYPTED_MATRIX: tuple[SpecimenDefinition, ...] = (
    SpecimenDefinition(
        "ext4_with_encrypted_files", EXT4, features="^has_journal,encrypt",
        populators=(Populator.CATALOG, Populator.ENCRYPTED),
    ),
)

UNICODE_MATRIX: tuple[SpecimenDefinition, ...] = (
    SpecimenDefinition(
        "ext2_unicode_files", EXT2,
        size_classes=(SizeClass(UNICODE_IMAGE_SIZE),),
        populators=(Populator.UNICODE,),
    ),
)

MATRICES: dict[str, tuple[SpecimenDefinition, ...]] = {
    "standard": STANDARD_MATRIX,
    "encrypted": ENCRYPTED_MATRIX,
    "unicode": UNICODE_MATRIX,
}
