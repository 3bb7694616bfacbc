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

"""Check that every external tool is reachable before doing any work."""

from __future__ import annotations

import logging
import shutil
from typing import Callable, Iterable, Optional

from .errors import ToolchainError


def check_toolchain(
    tools: Iterable[str],
    which: Callable[[str], Optional[str]] = shutil.which,
) -> None:
    """
    Ensure each tool in ``tools`` resolves on PATH.

    Stops at the first missing tool: there is no point in reporting the
    rest since nothing will be generated anyway.
    """
    for tool in tools:
        path = which(tool)
        if path is None:
            raise ToolchainError(f"Missing binary: {tool}")
        logging.debug("Found %s at %s", tool, path)
