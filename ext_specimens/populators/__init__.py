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

"""Populators fill a mounted image with the entities a specimen contains."""

from .catalog import (
    EntityKind,
    FileEntityDescriptor,
    build_catalog,
    populate_catalog,
    populate_encrypted,
    populate_large_xattr,
)
from .many_files import many_file_names, populate_many_files
from .sparse import HUGE_FILE_TIERS, STANDARD_TIERS, SparseTier, populate_sparse
from .unicode import (
    Outcome,
    UnicodeAttemptResult,
    candidate_name,
    populate_unicode,
    read_code_points,
)

__all__ = [
    "EntityKind",
    "FileEntityDescriptor",
    "HUGE_FILE_TIERS",
    "Outcome",
    "STANDARD_TIERS",
    "SparseTier",
    "UnicodeAttemptResult",
    "build_catalog",
    "candidate_name",
    "many_file_names",
    "populate_catalog",
    "populate_encrypted",
    "populate_large_xattr",
    "populate_many_files",
    "populate_sparse",
    "populate_unicode",
    "read_code_points",
]
