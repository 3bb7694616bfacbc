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
Exceptions raised while generating specimens.

Everything derived from :class:`SpecimenError` is fatal for the whole
run and is reported once by the command line entry point.  The single
exception is :class:`EntityError` raised while creating Unicode file
names, which the Unicode populator catches and records per code point.
"""


class SpecimenError(RuntimeError):
    """Something went wrong while generating the specimen corpus."""


class ConfigurationError(SpecimenError):
    """The command line or an input file is unusable."""


class ToolchainError(SpecimenError):
    """A required external tool or module is not available."""


class OutputExistsError(SpecimenError):
    """The output directory is already present."""


class MatrixError(SpecimenError):
    """A specimen definition cannot be expanded into valid jobs."""


class ImageBuildError(SpecimenError):
    """Allocating or formatting a backing store failed."""


class MountError(SpecimenError):
    """Mounting, handing over or unmounting an image failed."""


class PopulateError(SpecimenError):
    """A populator could not produce the entities it promises."""


class EntityError(PopulateError):
    """A single file system entity could not be created or inspected."""
