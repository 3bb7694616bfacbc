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

"""Fill the test directory with a large number of empty files."""

from __future__ import annotations

import logging
import posixpath
from typing import TYPE_CHECKING, Iterator

from ..errors import PopulateError
from .catalog import TEST_DIRECTORY

if TYPE_CHECKING:
    from ..session import PathLike, Session

# testfile1 and TestFile2 come from the catalog.
FIRST_INDEX = 3


def many_file_names(count: int) -> Iterator[str]:
    """
    Yield ``count`` names continuing the catalog's numbering.

    Even numbers use ``TestFile<n>``, odd numbers ``testfile<n>``, so a
    case insensitive lookup has to tell them apart.
    """
    for number in range(FIRST_INDEX, FIRST_INDEX + count):
        if number % 2 == 0:
            yield f"TestFile{number}"
        else:
            yield f"testfile{number}"


def populate_many_files(
    session: Session,
    count: int,
    created: set[PathLike] | None = None,
    directory: str = TEST_DIRECTORY,
) -> int:
    """
    Create ``count`` empty files in ``directory``.

    The image must already be large enough; nothing here checks the
    free space.
    """
    if count < 0:
        raise PopulateError(f"Negative file count: {count}")
    if created is not None and directory not in created:
        raise PopulateError(f"{directory!r} must be created before the files in it")

    logging.info("Creating %d files in %s", count, directory)
    for name in many_file_names(count):
        session.touch(posixpath.join(directory, name))
    return count
