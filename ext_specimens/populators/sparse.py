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
Nearly sparse files sized to cross the block addressing tiers.

Each file is truncated to the tier's length and then gets one line
naming the tier appended, so it ends in real data after a long hole.
Only the apparent size is checked: how the file system lays out the
few allocated blocks is exactly what the downstream parser is tested on.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Sequence

from ..errors import PopulateError

if TYPE_CHECKING:
    from ..session import Session

KiB = 1024
MiB = 1024 * KiB
GiB = 1024 * MiB
TiB = 1024 * GiB


@dataclasses.dataclass(frozen=True, slots=True)
class SparseTier:
    name: str
    size: int

    @property
    def line(self) -> bytes:
        return f"{self.name}\n".encode("ascii")


# With 1024 byte blocks.
STANDARD_TIERS = (
    # Fills the direct blocks.
    SparseTier("sparse_256k", 256 * KiB),
    # Fills the single indirect blocks.
    SparseTier("sparse_64m", 64 * MiB),
    # Fills the double indirect blocks.
    SparseTier("sparse_16g", 16 * GiB),
)

# With 4096 byte blocks and huge_file: 16 TiB is the maximum ext4 file
# size, less two blocks for the appended line.
HUGE_FILE_TIERS = (
    SparseTier("sparse_16t", 16 * TiB - 2 * 4096),
)


def _check_size(session: Session, tier: SparseTier, expected: int) -> None:
    size = session.apparent_size(tier.name)
    if size != expected:
        raise PopulateError(
            f"{tier.name}: apparent size is {size}, expected {expected}"
        )


def populate_sparse(session: Session,
                    tiers: Sequence[SparseTier] = STANDARD_TIERS) -> list[SparseTier]:
    for tier in tiers:
        logging.info("Creating %s (%d bytes)", tier.name, tier.size)
        session.truncate(tier.name, tier.size)
        _check_size(session, tier, tier.size)
        session.append(tier.name, tier.line)
        _check_size(session, tier, tier.size + len(tier.line))
    return list(tiers)
