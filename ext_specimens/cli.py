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
ext-specimens

Generate ext2, ext3 and ext4 test images for file system parsers.

Basic usage, as a user allowed to run sudo:

.. code-block:: console

    ext-specimens
    ext-specimens --matrix encrypted
    ext-specimens --matrix unicode --unicode-data ./UnicodeData.txt

Without loop devices or root, build inside the libguestfs appliance:

.. code-block:: console

    ext-specimens --backend appliance --only 'ext4_*'

The output directory must not exist yet; a finished corpus is never
mixed with a new one.
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from .backends import BACKENDS
from .config import (
    DEFAULT_BACKEND,
    DEFAULT_MOUNT_POINT,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_UNICODE_DATA,
    Config,
)
from .errors import SpecimenError
from .runner import generate
from .tables import MATRICES


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ext-specimens",
        description="Generate ext2/ext3/ext4 specimen images.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        default=DEFAULT_OUTPUT_DIR,
        help="Directory to create and write the images into.",
    )
    parser.add_argument(
        "-m",
        "--mount-point",
        default=DEFAULT_MOUNT_POINT,
        help="Where images are mounted while being populated.",
    )
    parser.add_argument(
        "-b",
        "--backend",
        choices=BACKENDS,
        default=DEFAULT_BACKEND,
        help="How images are formatted and mounted.",
    )
    parser.add_argument(
        "--matrix",
        action="append",
        choices=sorted(MATRICES),
        help="Job table to build (repeatable, default: standard).",
    )
    parser.add_argument(
        "--only",
        action="append",
        metavar="PATTERN",
        help="Only build specimens whose name matches this glob (repeatable).",
    )
    parser.add_argument(
        "--unicode-data",
        default=DEFAULT_UNICODE_DATA,
        help="Unicode character database for the unicode matrix.",
    )
    parser.add_argument(
        "--payload",
        default=None,
        help="File whose content fills the non-inline file and the large "
             "extended attribute (default: built in filler text).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the specimens and their mke2fs options; build nothing.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )
    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    cfg = Config.from_args(args)
    logging.debug("Using config: %r", cfg)

    try:
        generate(cfg)
    except SpecimenError as exc:
        logging.error("%s", exc)
        return 1

    return 0
