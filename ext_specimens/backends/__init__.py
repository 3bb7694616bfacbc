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
Backends format, mount and unmount images.

Two are available:

* ``host``: mke2fs and a loop mount on the host, with privileged steps
  run through ``sudo`` (see ``host.py``).
* ``appliance``: the libguestfs appliance, driven through the ``guestfs``
  Python binding; needs neither root nor loop devices (see
  ``appliance.py``).

The orchestration code only ever talks to the :class:`Backend` methods
below and to the :class:`~ext_specimens.session.Session` they return.
"""

from __future__ import annotations

import contextlib
import os
from typing import TYPE_CHECKING, Iterator, Sequence

from ..errors import ConfigurationError, EntityError

if TYPE_CHECKING:
    from ..config import Config
    from ..image import BackingStore
    from ..matrix import SpecimenJob
    from ..session import PathLike, Session


class Backend:
    name = ""

    def required_tools(self, jobs: Sequence[SpecimenJob]) -> list[str]:
        """External programs the given jobs will need."""
        return []

    def format(self, store: BackingStore, job: SpecimenJob) -> None:
        raise NotImplementedError

    def mount(self, store: BackingStore, mount_point: str) -> Session:
        raise NotImplementedError

    def unmount(self, session: Session) -> None:
        raise NotImplementedError


@contextlib.contextmanager
def entity_errors(action: str, path: PathLike,
                  *exc_types: type[BaseException]) -> Iterator[None]:
    """Turn low level failures of one entity operation into EntityError."""
    try:
        yield
    except exc_types as exc:
        name = os.fsdecode(path) if isinstance(path, bytes) else path
        raise EntityError(f"Cannot {action} {name!r}: {exc}") from exc


def get_backend(name: str, config: Config) -> Backend:
    if name == "host":
        from .host import HostBackend
        return HostBackend(
            privilege_command=config.privilege_command,
            owner=config.owner,
        )
    if name == "appliance":
        from .appliance import ApplianceBackend
        return ApplianceBackend()
    raise ConfigurationError(f"Unknown backend: {name}")


BACKENDS = ("host", "appliance")
