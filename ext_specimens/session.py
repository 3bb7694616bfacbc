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
Mount sessions.

A :class:`Session` is the handle every populator receives: it names the
mounted image and offers one method per kind of entity.  Paths passed
to a session are relative to the root of the mounted file system and
may be ``str`` or ``bytes`` (the latter for names that are not valid
UTF-8 text).

:class:`MountPoint` owns the one mount point of the run.  Its
:meth:`MountPoint.session` context manager mounts a backing store,
yields the session and unmounts again on every way out of the ``with``
block, including exceptions and ``KeyboardInterrupt``.
"""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Iterator, Union

if TYPE_CHECKING:
    from .backends import Backend
    from .image import BackingStore

PathLike = Union[str, bytes]


class Session:
    """
    Operations on a mounted image.

    Backends subclass this.  Every operation raises
    :class:`~ext_specimens.errors.EntityError` when the entity cannot be
    created or inspected.
    """

    def __init__(self, store: BackingStore, mount_point: str) -> None:
        self.store = store
        # The mount point as the populators see it; symbolic link
        # targets are built from it.
        self.mount_point = mount_point

    def touch(self, path: PathLike) -> None:
        raise NotImplementedError

    def mkdir(self, path: PathLike) -> None:
        raise NotImplementedError

    def write(self, path: PathLike, data: bytes) -> None:
        raise NotImplementedError

    def append(self, path: PathLike, data: bytes) -> None:
        raise NotImplementedError

    def link(self, target: PathLike, path: PathLike) -> None:
        raise NotImplementedError

    def symlink(self, target: str, path: PathLike) -> None:
        raise NotImplementedError

    def truncate(self, path: PathLike, size: int) -> None:
        raise NotImplementedError

    def allocate(self, path: PathLike, length: int) -> None:
        """Preallocate ``length`` bytes as an uninitialized extent."""
        raise NotImplementedError

    def set_xattr(self, path: PathLike, name: str, value: bytes) -> None:
        raise NotImplementedError

    def get_xattr(self, path: PathLike, name: str) -> bytes:
        raise NotImplementedError

    def make_device(self, path: PathLike, kind: str, major: int, minor: int) -> None:
        """Create a device node; ``kind`` is ``"b"`` or ``"c"``."""
        raise NotImplementedError

    def make_fifo(self, path: PathLike) -> None:
        raise NotImplementedError

    def apparent_size(self, path: PathLike) -> int:
        raise NotImplementedError

    def add_encryption_key(self) -> None:
        raise NotImplementedError

    def encryption_policy(self) -> str:
        raise NotImplementedError

    def set_encryption_policy(self, path: PathLike, policy: str) -> None:
        raise NotImplementedError


class MountPoint:
    """The single mount point shared by all jobs of a run."""

    def __init__(self, backend: Backend, path: str) -> None:
        self.backend = backend
        self.path = path
        self.active: Session | None = None

    @contextlib.contextmanager
    def session(self, store: BackingStore) -> Iterator[Session]:
        if self.active is not None:
            raise RuntimeError(
                f"mount point {self.path} is still in use by "
                f"{self.active.store.path}"
            )

        logging.debug("Mounting %s on %s", store.path, self.path)
        session = self.backend.mount(store, self.path)
        self.active = session
        try:
            yield session
        except BaseException as exc:
            self._release(store, session, exc)
            raise
        else:
            self._release(store, session, None)

    def _release(self, store: BackingStore, session: Session,
                 pending: BaseException | None) -> None:
        try:
            logging.debug("Unmounting %s", store.path)
            self.backend.unmount(session)
        except Exception:
            # The unmount failure replaces the one that ended the
            # session; report that one before it is lost.
            if pending is not None:
                logging.error("Populating %s failed: %s", store.path, pending)
            raise
        finally:
            self.active = None
