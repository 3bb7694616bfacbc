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
One file per code point of the Unicode character database.

Each code point listed in ``UnicodeData.txt`` gets a file named
``unicode_U+<8 hex digits>_<character>`` in the test directory, with the
character encoded as UTF-8.  Some code points cannot be a path component
at all (NUL, ``/``, lone surrogates); those are logged and counted as
rejected while the run carries on.  Every code point is tried exactly
once, in file order.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from ..errors import ConfigurationError, EntityError

if TYPE_CHECKING:
    from ..session import Session

UNICODE_DIRECTORY = "testdir1"
NAME_PREFIX = b"unicode_U+"
NAME_SEPARATOR = b"_"


class Outcome(enum.Enum):
    CREATED = "created"
    REJECTED = "rejected"


@dataclasses.dataclass(frozen=True, slots=True)
class UnicodeAttemptResult:
    code_point: int
    outcome: Outcome


def read_code_points(path: Path) -> list[int]:
    """
    Return the code point of every record in a UnicodeData.txt file.

    The code point is the first ``;`` separated field, in hexadecimal.
    Blank lines are ignored; anything else that does not parse is an
    error.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}") from exc

    code_points = []
    for lineno, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        field = line.split(";", 1)[0].strip()
        try:
            code_points.append(int(field, 16))
        except ValueError:
            raise ConfigurationError(
                f"{path}:{lineno}: not a code point: {field!r}"
            ) from None
    return code_points


def candidate_name(code_point: int) -> bytes:
    """
    Build the file name for ``code_point``.

    Raises ``ValueError`` when the code point has no UTF-8 encoding
    (surrogates, values above U+10FFFF).
    """
    character = chr(code_point).encode("utf-8")
    return NAME_PREFIX + b"%08x" % code_point + NAME_SEPARATOR + character


def populate_unicode(
    session: Session,
    code_points: Iterable[int],
    directory: str = UNICODE_DIRECTORY,
) -> list[UnicodeAttemptResult]:
    session.mkdir(directory)
    prefix = directory.encode("ascii") + b"/"

    results = []
    for code_point in code_points:
        try:
            session.touch(prefix + candidate_name(code_point))
        except (EntityError, ValueError, OverflowError):
            logging.warning("Unsupported: 0x%08x", code_point)
            outcome = Outcome.REJECTED
        else:
            outcome = Outcome.CREATED
        results.append(UnicodeAttemptResult(code_point, outcome))

    rejected = sum(1 for r in results if r.outcome is Outcome.REJECTED)
    logging.info("%d of %d code points supported in %s",
                 len(results) - rejected, len(results),
                 posixpath.join(session.mount_point, directory))
    return results
