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
Host backend: mke2fs plus a loop mount.

Only a handful of steps need root: creating the mount point, mounting,
handing the mounted root over to the invoking user, unmounting, device
node creation and loading the encryption key.  Those are run through
the privilege command (``sudo`` by default).  Everything else is done
as the invoking user with plain :mod:`os` calls on the mounted tree.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from typing import TYPE_CHECKING, Callable, Sequence

from ..errors import EntityError, ImageBuildError, MountError, SpecimenError
from ..matrix import Populator
from ..session import Session
from . import Backend, entity_errors

if TYPE_CHECKING:
    from ..image import BackingStore
    from ..matrix import SpecimenJob
    from ..session import PathLike

# `keyctl show` lists ext4 session keys as e.g.
#   "  22134 --alsw-v  1000  1000   \_ logon: ext4:69ca01c4b1b8ad98"
LOGON_KEY_RE = re.compile(r"logon: ext[234]:(\S+)")


def parse_policy_identifier(keyctl_output: str) -> str | None:
    """Return the identifier of the last ext4 logon key, if any."""
    matches = LOGON_KEY_RE.findall(keyctl_output)
    return matches[-1] if matches else None


class HostBackend(Backend):
    name = "host"

    def __init__(
        self,
        privilege_command: Sequence[str] = ("sudo",),
        owner: str | None = None,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.privilege_command = list(privilege_command)
        self.owner = owner
        self.run = run

    def required_tools(self, jobs: Sequence[SpecimenJob]) -> list[str]:
        tools = self.privilege_command[:1]
        tools += ["mke2fs", "mount", "umount", "chown"]
        if any(job.needs(Populator.CATALOG) for job in jobs):
            tools.append("mknod")
        if any(job.needs(Populator.ENCRYPTED) for job in jobs):
            tools += ["e4crypt", "keyctl"]
        return tools

    def command(
        self,
        argv: list[str],
        *,
        privileged: bool = False,
        error: type[SpecimenError] = SpecimenError,
        capture: bool = False,
    ) -> subprocess.CompletedProcess:
        """Run an external command, raising ``error`` if it fails."""
        if privileged:
            argv = self.privilege_command + argv
        logging.debug("Running: %s", " ".join(argv))
        try:
            return self.run(
                argv,
                check=True,
                text=True,
                stdout=subprocess.PIPE if capture else None,
            )
        except subprocess.CalledProcessError as exc:
            raise error(
                f"{argv[0]} failed with exit code {exc.returncode}: "
                f"{' '.join(argv)}"
            ) from exc
        except OSError as exc:
            raise error(f"Cannot run {argv[0]}: {exc}") from exc

    def format(self, store: BackingStore, job: SpecimenJob) -> None:
        # -N: the minimum number of inodes seems to be 16, so it is never
        # passed and mke2fs picks a value from the image size.
        self.command(
            ["mke2fs", "-q", *job.formatter_options(), str(store.path)],
            error=ImageBuildError,
        )

    def mount(self, store: BackingStore, mount_point: str) -> HostSession:
        if not os.path.isdir(mount_point):
            self.command(["mkdir", "-p", mount_point],
                         privileged=True, error=MountError)

        self.command(
            ["mount", "-o", "loop,rw", str(store.path), mount_point],
            privileged=True, error=MountError,
        )
        if self.owner:
            try:
                self.command(["chown", self.owner, mount_point],
                             privileged=True, error=MountError)
            except MountError:
                self.command(["umount", mount_point],
                             privileged=True, error=MountError)
                raise

        return HostSession(store, mount_point, self)

    def unmount(self, session: Session) -> None:
        self.command(["umount", session.mount_point],
                     privileged=True, error=MountError)


class HostSession(Session):
    FILE_ERRORS = (OSError, ValueError)

    def __init__(self, store: BackingStore, mount_point: str,
                 backend: HostBackend) -> None:
        super().__init__(store, mount_point)
        self.backend = backend

    def _path(self, path: PathLike) -> bytes:
        return os.path.join(os.fsencode(self.mount_point), os.fsencode(path))

    def touch(self, path: PathLike) -> None:
        with entity_errors("create", path, *self.FILE_ERRORS):
            with open(self._path(path), "ab"):
                pass

    def mkdir(self, path: PathLike) -> None:
        with entity_errors("create directory", path, *self.FILE_ERRORS):
            os.mkdir(self._path(path))

    def write(self, path: PathLike, data: bytes) -> None:
        with entity_errors("write", path, *self.FILE_ERRORS):
            with open(self._path(path), "wb") as f:
                f.write(data)

    def append(self, path: PathLike, data: bytes) -> None:
        with entity_errors("append to", path, *self.FILE_ERRORS):
            with open(self._path(path), "ab") as f:
                f.write(data)

    def link(self, target: PathLike, path: PathLike) -> None:
        with entity_errors("hard link", path, *self.FILE_ERRORS):
            os.link(self._path(target), self._path(path))

    def symlink(self, target: str, path: PathLike) -> None:
        with entity_errors("symlink", path, *self.FILE_ERRORS):
            os.symlink(target, self._path(path))

    def truncate(self, path: PathLike, size: int) -> None:
        with entity_errors("truncate", path, *self.FILE_ERRORS):
            with open(self._path(path), "ab") as f:
                f.truncate(size)

    def allocate(self, path: PathLike, length: int) -> None:
        with entity_errors("allocate", path, *self.FILE_ERRORS):
            fd = os.open(self._path(path), os.O_WRONLY | os.O_CREAT, 0o644)
            try:
                os.posix_fallocate(fd, 0, length)
            finally:
                os.close(fd)

    def set_xattr(self, path: PathLike, name: str, value: bytes) -> None:
        with entity_errors("set attribute on", path, *self.FILE_ERRORS):
            os.setxattr(self._path(path), name, value)

    def get_xattr(self, path: PathLike, name: str) -> bytes:
        with entity_errors("read attribute of", path, *self.FILE_ERRORS):
            return os.getxattr(self._path(path), name)

    def make_device(self, path: PathLike, kind: str, major: int, minor: int) -> None:
        # mknod(2) of device nodes needs CAP_MKNOD.
        self.backend.command(
            ["mknod", os.fsdecode(self._path(path)), kind, str(major), str(minor)],
            privileged=True, error=EntityError,
        )

    def make_fifo(self, path: PathLike) -> None:
        with entity_errors("create FIFO", path, *self.FILE_ERRORS):
            os.mkfifo(self._path(path))

    def apparent_size(self, path: PathLike) -> int:
        with entity_errors("stat", path, *self.FILE_ERRORS):
            return os.lstat(self._path(path)).st_size

    def add_encryption_key(self) -> None:
        # Prompts for the passphrase on the terminal.
        self.backend.command(["e4crypt", "add_key"],
                             privileged=True, error=EntityError)

    def encryption_policy(self) -> str:
        result = self.backend.command(["keyctl", "show"],
                                      error=EntityError, capture=True)
        policy = parse_policy_identifier(result.stdout or "")
        if policy is None:
            raise EntityError("No ext4 encryption key in the session keyring")
        return policy

    def set_encryption_policy(self, path: PathLike, policy: str) -> None:
        self.backend.command(
            ["e4crypt", "set_policy", policy, os.fsdecode(self._path(path))],
            error=EntityError,
        )
