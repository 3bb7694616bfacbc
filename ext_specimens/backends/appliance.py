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
Appliance backend: format and populate images inside libguestfs.

The raw backing store is attached to a libguestfs handle as
``/dev/sda`` and formatted there with the job's mke2fs options.  The
mount session launches a fresh handle, mounts ``/dev/sda`` on ``/``
inside the appliance and performs every entity operation through the
handle, so no step needs root on the host.

libguestfs cannot pass ``-G`` together with ``-O`` to mke2fs and has no
fscrypt support, so jobs asking for either fail with a clear error
instead of producing a different specimen.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Callable, Sequence

from ..errors import EntityError, ImageBuildError, MountError, ToolchainError
from ..session import Session
from . import Backend, entity_errors

if TYPE_CHECKING:
    from ..image import BackingStore
    from ..matrix import SpecimenJob
    from ..session import PathLike

DEVICE = "/dev/sda"

# Permission bits for device nodes and FIFOs (mknod default, umask 022).
NODE_MODE = 0o644


def _import_guestfs() -> Any:
    try:
        import guestfs
    except ImportError as exc:
        raise ToolchainError(
            "The 'guestfs' Python module is not installed. "
            "On Debian/Ubuntu, try: sudo apt install python3-guestfs"
        ) from exc
    return guestfs


def default_handle_factory() -> Callable[[], Any]:
    guestfs = _import_guestfs()
    return lambda: guestfs.GuestFS(python_return_dict=True)


class ApplianceBackend(Backend):
    name = "appliance"

    def __init__(self, handle_factory: Callable[[], Any] | None = None) -> None:
        self.handle_factory = handle_factory or default_handle_factory()

    def required_tools(self, jobs: Sequence[SpecimenJob]) -> list[str]:
        # Everything runs inside the appliance.
        return []

    def _launch(self, store: BackingStore) -> Any:
        g = self.handle_factory()
        g.add_drive_opts(str(store.path), format="raw", readonly=0)
        g.launch()
        return g

    def format(self, store: BackingStore, job: SpecimenJob) -> None:
        if job.flex_bg_size is not None:
            raise ImageBuildError(
                f"{job.name}: the appliance backend cannot set the number of "
                "block groups per flex group"
            )

        optargs: dict[str, Any] = {"label": job.label}
        if job.block_size is not None:
            optargs["blocksize"] = job.block_size
        if job.inode_size is not None:
            optargs["inode"] = job.inode_size
        if job.feature_string is not None:
            optargs["features"] = job.feature_string

        logging.debug("mkfs %s %s %r", job.kind.value, DEVICE, optargs)
        g = None
        try:
            g = self._launch(store)
            g.mkfs(job.kind.value, DEVICE, **optargs)
            g.shutdown()
        except RuntimeError as exc:
            raise ImageBuildError(f"Cannot format {store.path}: {exc}") from exc
        finally:
            if g is not None:
                g.close()

    def mount(self, store: BackingStore, mount_point: str) -> ApplianceSession:
        g = None
        try:
            g = self._launch(store)
            g.mount(DEVICE, "/")
        except RuntimeError as exc:
            if g is not None:
                g.close()
            raise MountError(f"Cannot mount {store.path}: {exc}") from exc
        return ApplianceSession(store, mount_point, g)

    def unmount(self, session: Session) -> None:
        g = session.g
        try:
            g.umount_all()
            # shutdown() syncs the disk; errors here mean lost writes.
            g.shutdown()
        except RuntimeError as exc:
            raise MountError(
                f"Cannot unmount {session.store.path}: {exc}"
            ) from exc
        finally:
            g.close()


class ApplianceSession(Session):
    # The binding raises RuntimeError for daemon errors and
    # UnicodeEncodeError (a ValueError) for names it cannot marshal.
    HANDLE_ERRORS = (RuntimeError, ValueError)

    def __init__(self, store: BackingStore, mount_point: str, g: Any) -> None:
        super().__init__(store, mount_point)
        self.g = g

    @staticmethod
    def _path(path: PathLike) -> str:
        if isinstance(path, bytes):
            path = os.fsdecode(path)
        return "/" + path.lstrip("/")

    def touch(self, path: PathLike) -> None:
        with entity_errors("create", path, *self.HANDLE_ERRORS):
            self.g.touch(self._path(path))

    def mkdir(self, path: PathLike) -> None:
        with entity_errors("create directory", path, *self.HANDLE_ERRORS):
            self.g.mkdir(self._path(path))

    def write(self, path: PathLike, data: bytes) -> None:
        with entity_errors("write", path, *self.HANDLE_ERRORS):
            self.g.write(self._path(path), data)

    def append(self, path: PathLike, data: bytes) -> None:
        with entity_errors("append to", path, *self.HANDLE_ERRORS):
            self.g.write_append(self._path(path), data)

    def link(self, target: PathLike, path: PathLike) -> None:
        with entity_errors("hard link", path, *self.HANDLE_ERRORS):
            self.g.ln(self._path(target), self._path(path))

    def symlink(self, target: str, path: PathLike) -> None:
        with entity_errors("symlink", path, *self.HANDLE_ERRORS):
            self.g.ln_s(target, self._path(path))

    def truncate(self, path: PathLike, size: int) -> None:
        with entity_errors("truncate", path, *self.HANDLE_ERRORS):
            # truncate_size wants an existing file.
            self.g.touch(self._path(path))
            self.g.truncate_size(self._path(path), size)

    def allocate(self, path: PathLike, length: int) -> None:
        with entity_errors("allocate", path, *self.HANDLE_ERRORS):
            self.g.fallocate64(self._path(path), length)

    def set_xattr(self, path: PathLike, name: str, value: bytes) -> None:
        with entity_errors("set attribute on", path, *self.HANDLE_ERRORS):
            # val is a String parameter of the binding; vallen counts
            # the bytes of its UTF-8 encoding.
            self.g.setxattr(name, value.decode("utf-8"), len(value),
                            self._path(path))

    def get_xattr(self, path: PathLike, name: str) -> bytes:
        with entity_errors("read attribute of", path, *self.HANDLE_ERRORS):
            return bytes(self.g.getxattr(self._path(path), name))

    def make_device(self, path: PathLike, kind: str, major: int, minor: int) -> None:
        with entity_errors("create device", path, *self.HANDLE_ERRORS):
            if kind == "b":
                self.g.mknod_b(NODE_MODE, major, minor, self._path(path))
            elif kind == "c":
                self.g.mknod_c(NODE_MODE, major, minor, self._path(path))
            else:
                raise ValueError(f"unknown device kind {kind!r}")

    def make_fifo(self, path: PathLike) -> None:
        with entity_errors("create FIFO", path, *self.HANDLE_ERRORS):
            self.g.mkfifo(NODE_MODE, self._path(path))

    def apparent_size(self, path: PathLike) -> int:
        with entity_errors("stat", path, *self.HANDLE_ERRORS):
            return self.g.lstatns(self._path(path))["st_size"]

    def add_encryption_key(self) -> None:
        raise EntityError("The appliance backend does not support encryption")

    def encryption_policy(self) -> str:
        raise EntityError("The appliance backend does not support encryption")

    def set_encryption_policy(self, path: PathLike, policy: str) -> None:
        raise EntityError("The appliance backend does not support encryption")
