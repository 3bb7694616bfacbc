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
Expansion of declarative specimen definitions into build jobs.

A :class:`SpecimenDefinition` is one row of a job table (see
``tables.py``).  A row may name several file system kinds, block sizes,
inode sizes and size classes; :func:`expand` walks them in the order
they are written and yields one fully parameterized :class:`SpecimenJob`
per combination.  Nothing here touches the disk, so the expansion is
identical from run to run.
"""

from __future__ import annotations

import dataclasses
import enum
import fnmatch
import itertools
from typing import Iterable, Sequence

from .errors import MatrixError

__all__ = [
    "DEFAULT_IMAGE_SIZE",
    "DEFAULT_SECTOR_SIZE",
    "FeatureToggle",
    "FilesystemKind",
    "Populator",
    "SizeClass",
    "SpecimenDefinition",
    "SpecimenJob",
    "expand",
    "parse_features",
    "select",
]

# 4 MiB images with 512 byte sectors, as for every specimen that does not
# say otherwise.
DEFAULT_IMAGE_SIZE = 4096 * 1024
DEFAULT_SECTOR_SIZE = 512


class FilesystemKind(enum.Enum):
    EXT2 = "ext2"
    EXT3 = "ext3"
    EXT4 = "ext4"

    def __str__(self) -> str:
        return self.value


class Populator(enum.Enum):
    """Population steps a job runs inside its mount session, in order."""

    CATALOG = "catalog"
    LARGE_XATTR = "large-xattr"
    ENCRYPTED = "encrypted"
    MANY_FILES = "many-files"
    SPARSE = "sparse"
    HUGE_SPARSE = "huge-sparse"
    UNICODE = "unicode"


@dataclasses.dataclass(frozen=True, slots=True)
class FeatureToggle:
    """A single ``-O`` feature of the formatter, enabled or disabled."""

    name: str
    enabled: bool = True

    def __str__(self) -> str:
        return self.name if self.enabled else f"^{self.name}"


def parse_features(text: str) -> tuple[FeatureToggle, ...]:
    """
    Parse a comma separated feature list such as ``^has_journal,dir_index``.

    Repeating a toggle is harmless and collapses into one entry.  Asking
    for the same feature to be both enabled and disabled raises
    :class:`MatrixError`.
    """
    toggles: list[FeatureToggle] = []
    seen: dict[str, bool] = {}

    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        enabled = not item.startswith("^")
        name = item.lstrip("^")
        if not name:
            raise MatrixError(f"Empty feature name in {text!r}")

        if name in seen:
            if seen[name] != enabled:
                raise MatrixError(
                    f"Feature {name!r} is both enabled and disabled in {text!r}"
                )
            continue
        seen[name] = enabled
        toggles.append(FeatureToggle(name, enabled))

    return tuple(toggles)


@dataclasses.dataclass(frozen=True, slots=True)
class SizeClass:
    """Image size, optionally tied to the number of files it must hold."""

    total_size: int
    file_count: int | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class SpecimenJob:
    name: str
    kind: FilesystemKind
    label: str
    total_size: int = DEFAULT_IMAGE_SIZE
    sector_size: int = DEFAULT_SECTOR_SIZE
    block_size: int | None = None
    inode_size: int | None = None
    features: tuple[FeatureToggle, ...] = ()
    flex_bg_size: int | None = None
    file_count: int | None = None
    populators: tuple[Populator, ...] = (Populator.CATALOG,)

    def __post_init__(self) -> None:
        if self.sector_size <= 0:
            raise MatrixError(f"{self.name}: sector size must be positive")
        if self.total_size <= 0:
            raise MatrixError(f"{self.name}: image size must be positive")
        if self.total_size % self.sector_size:
            raise MatrixError(
                f"{self.name}: image size {self.total_size} is not a multiple "
                f"of the sector size {self.sector_size}"
            )

        names = [t.name for t in self.features]
        if len(names) != len(set(names)):
            raise MatrixError(f"{self.name}: duplicate feature toggles")

        if Populator.MANY_FILES in self.populators and not self.file_count:
            raise MatrixError(f"{self.name}: many-files step needs a file count")

    @property
    def artifact_name(self) -> str:
        return f"{self.name}.raw"

    @property
    def feature_string(self) -> str | None:
        if not self.features:
            return None
        return ",".join(str(t) for t in self.features)

    def needs(self, populator: Populator) -> bool:
        return populator in self.populators

    def formatter_options(self) -> list[str]:
        """Return the mke2fs options for this job, without the image path."""
        options = ["-t", self.kind.value, "-L", self.label]
        if self.block_size is not None:
            options += ["-b", str(self.block_size)]
        if self.inode_size is not None:
            options += ["-I", str(self.inode_size)]
        if self.feature_string is not None:
            options += ["-O", self.feature_string]
        if self.flex_bg_size is not None:
            options += ["-G", str(self.flex_bg_size)]
        return options


@dataclasses.dataclass(frozen=True, slots=True)
class SpecimenDefinition:
    """
    One row of a job table.

    ``name`` and ``label`` are :meth:`str.format` templates receiving
    ``kind``, ``block_size``, ``inode_size`` and ``file_count``.
    """

    name: str
    kinds: tuple[FilesystemKind, ...]
    features: str = ""
    block_sizes: tuple[int | None, ...] = (None,)
    inode_sizes: tuple[int | None, ...] = (None,)
    size_classes: tuple[SizeClass, ...] = (SizeClass(DEFAULT_IMAGE_SIZE),)
    sector_size: int = DEFAULT_SECTOR_SIZE
    label: str = "{kind}_test"
    flex_bg_size: int | None = None
    populators: tuple[Populator, ...] = (Populator.CATALOG,)

    def jobs(self) -> Iterable[SpecimenJob]:
        if not self.kinds:
            raise MatrixError(f"{self.name}: no file system kind given")

        features = parse_features(self.features)
        combos = itertools.product(
            self.kinds, self.block_sizes, self.inode_sizes, self.size_classes
        )
        for kind, block_size, inode_size, size_class in combos:
            fields = {
                "kind": kind.value,
                "block_size": block_size,
                "inode_size": inode_size,
                "file_count": size_class.file_count,
            }
            try:
                name = self.name.format(**fields)
                label = self.label.format(**fields)
            except (KeyError, IndexError) as exc:
                raise MatrixError(
                    f"Bad template in definition {self.name!r}: {exc}"
                ) from exc

            yield SpecimenJob(
                name=name,
                kind=kind,
                label=label,
                total_size=size_class.total_size,
                sector_size=self.sector_size,
                block_size=block_size,
                inode_size=inode_size,
                features=features,
                flex_bg_size=self.flex_bg_size,
                file_count=size_class.file_count,
                populators=self.populators,
            )


def expand(definitions: Iterable[SpecimenDefinition]) -> list[SpecimenJob]:
    """
    Expand job table rows into an ordered list of jobs.

    Any malformed row fails the whole expansion; nothing is skipped.
    Two jobs producing the same artifact name are also rejected.
    """
    jobs: list[SpecimenJob] = []
    names: set[str] = set()

    for definition in definitions:
        for job in definition.jobs():
            if job.name in names:
                raise MatrixError(f"Duplicate specimen name: {job.name}")
            names.add(job.name)
            jobs.append(job)

    return jobs


def select(jobs: Sequence[SpecimenJob], patterns: Sequence[str]) -> list[SpecimenJob]:
    """Keep the jobs whose name matches one of the glob ``patterns``."""
    if not patterns:
        return list(jobs)
    return [
        job for job in jobs
        if any(fnmatch.fnmatchcase(job.name, p) for p in patterns)
    ]
