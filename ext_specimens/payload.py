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

"""Content for the entities that must not fit inline."""

from __future__ import annotations

from pathlib import Path

from .errors import ConfigurationError
from .populators.catalog import LARGE_XATTR_SIZE

LOREM = b"""\
Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tempor incididunt ut labore et dolore magna aliqua. Ut enim ad minim veniam, quis nostrud exercitation ullamco laboris nisi ut aliquip ex ea commodo consequat. Duis aute irure dolor in reprehenderit in voluptate velit esse cillum dolore eu fugiat nulla pariatur. Excepteur sint occaecat cupidatat non proident, sunt in culpa qui officia deserunt mollit anim id est laborum.

Curabitur pretium tincidunt lacus. Nulla gravida orci a odio. Nullam varius, turpis et commodo pharetra, est eros bibendum elit, nec luctus magna felis sollicitudin mauris. Integer in mauris eu nibh euismod gravida. Duis ac tellus et risus vulputate vehicula. Donec lobortis risus a elit. Etiam tempor. Ut ullamcorper, ligula eu tempor congue, eros est euismod turpis, id tincidunt sapien risus a quam. Maecenas fermentum consequat mi. Donec fermentum. Pellentesque malesuada nulla a mi. Duis sapien sem, aliquet nec, commodo eget, consequat quis, neque. Aliquam faucibus, elit ut dictum aliquet, felis nisl adipiscing sapien, sed malesuada diam lacus eget erat. Cras mollis scelerisque nunc. Nullam arcu. Aliquam consequat. Curabitur augue lorem, dapibus quis, laoreet et, pretium ac, nisi. Aenean magna nisl, mollis quis, molestie eu, feugiat in, orci. In hac habitasse platea dictumst.

"""

# Large enough to need data blocks in every specimen and to feed an 8 KiB
# extended attribute value.
DEFAULT_PAYLOAD_SIZE = 11 * 1024


def default_payload(size: int = DEFAULT_PAYLOAD_SIZE) -> bytes:
    """Return ``size`` bytes of repeated filler text."""
    repeat = size // len(LOREM) + 1
    return (LOREM * repeat)[:size]


def load_payload(path: Path | None) -> bytes:
    """
    Read the payload from ``path``, or use the built in filler.

    A payload shorter than the large extended attribute would produce
    specimens whose "large" attribute and non-inline file are neither.
    """
    if path is None:
        return default_payload()
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read payload {path}: {exc}") from exc
    if len(data) < LARGE_XATTR_SIZE:
        raise ConfigurationError(
            f"Payload {path} has {len(data)} bytes, at least "
            f"{LARGE_XATTR_SIZE} are needed to fill the large attribute"
        )
    return data
