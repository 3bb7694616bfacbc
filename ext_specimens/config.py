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

"""Run configuration, built from the command line and the environment."""

from __future__ import annotations

import argparse
import dataclasses
import getpass
import os
import shlex
from pathlib import Path
from typing import Optional

DEFAULT_OUTPUT_DIR = "specimens/mke2fs"
DEFAULT_MOUNT_POINT = "/mnt/ext"
DEFAULT_UNICODE_DATA = "UnicodeData.txt"
DEFAULT_BACKEND = "host"
DEFAULT_MATRIX = "standard"


def default_privilege_command() -> tuple[str, ...]:
    # $EXT_SPECIMENS_SUDO may be empty to run privileged steps directly.
    env = os.environ.get("EXT_SPECIMENS_SUDO")
    if env is not None:
        return tuple(shlex.split(env))
    if os.geteuid() == 0:
        return ()
    return ("sudo",)


def default_owner() -> Optional[str]:
    """The user who should own the mounted tree while populating it."""
    if os.environ.get("SUDO_USER"):
        return os.environ["SUDO_USER"]
    if os.geteuid() == 0:
        return None
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return None


@dataclasses.dataclass(slots=True)
class Config:
    output_dir: Path
    mount_point: str = DEFAULT_MOUNT_POINT
    backend: str = DEFAULT_BACKEND
    matrices: tuple[str, ...] = (DEFAULT_MATRIX,)
    only: tuple[str, ...] = ()
    unicode_data: Path = Path(DEFAULT_UNICODE_DATA)
    payload: Optional[Path] = None
    privilege_command: tuple[str, ...] = ("sudo",)
    owner: Optional[str] = None
    dry_run: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> Config:
        return cls(
            output_dir=Path(args.output_dir),
            mount_point=args.mount_point,
            backend=args.backend,
            # Keep the order given, drop repeats.
            matrices=tuple(dict.fromkeys(args.matrix or [DEFAULT_MATRIX])),
            only=tuple(args.only or ()),
            unicode_data=Path(args.unicode_data),
            payload=Path(args.payload) if args.payload else None,
            privilege_command=default_privilege_command(),
            owner=default_owner(),
            dry_run=args.dry_run,
        )
