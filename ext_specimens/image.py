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
Image builder.

Each job gets its own backing store: a zero filled raw file written
sector by sector, then handed to the backend's formatter.  While the job
runs the file carries a ``-t`` suffix; :func:`finalize` renames it once
its mount session has been closed, so an interrupted run never leaves
something that looks like a finished specimen.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import ImageBuildError

if TYPE_CHECKING:
    from .backends import Backend
    from .matrix import SpecimenJob

# Number of sectors written per call when zero filling.
SECTORS_PER_WRITE = 2048

TEMPORARY_SUFFIX = "-t"


@dataclasses.dataclass(frozen=True, slots=True)
class BackingStore:
    path: Path
    size: int
    sector_size: int

    @property
    def sectors(self) -> int:
        return self.size // self.sector_size


def allocate_backing_store(path: Path, size: int, sector_size: int) -> BackingStore:
    """
    Create (or overwrite) ``path`` holding exactly ``size`` zero bytes.

    The size must be a whole number of sectors.  Running out of space on
    the host surfaces as :class:`ImageBuildError`.
    """
    if sector_size <= 0 or size <= 0 or size % sector_size:
        raise ImageBuildError(
            f"Cannot allocate {size} bytes in whole {sector_size} byte sectors"
        )

    store = BackingStore(Path(path), size, sector_size)
    logging.debug("Allocating %s (%d sectors of %d bytes)",
                  store.path, store.sectors, sector_size)

    chunk = bytes(sector_size * SECTORS_PER_WRITE)
    remaining = store.sectors
    try:
        with open(store.path, "wb") as f:
            while remaining:
                count = min(remaining, SECTORS_PER_WRITE)
                f.write(chunk if count == SECTORS_PER_WRITE
                        else chunk[:count * sector_size])
                remaining -= count
    except OSError as exc:
        raise ImageBuildError(f"Cannot write {store.path}: {exc}") from exc

    return store


def build_image(backend: Backend, job: SpecimenJob, output_dir: Path) -> BackingStore:
    """Allocate the backing store for ``job`` and format it."""
    path = Path(output_dir) / (job.artifact_name + TEMPORARY_SUFFIX)
    store = allocate_backing_store(path, job.total_size, job.sector_size)
    backend.format(store, job)
    return store


def finalize(store: BackingStore) -> Path:
    """Move a finished image from its temporary name to its final name."""
    name = store.path.name
    if not name.endswith(TEMPORARY_SUFFIX):
        return store.path
    final = store.path.with_name(name[:-len(TEMPORARY_SUFFIX)])
    os.rename(store.path, final)
    return final
