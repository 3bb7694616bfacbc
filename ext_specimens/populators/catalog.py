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
The fixed catalog of file system entities.

Every specimen built from the standard tables contains exactly the
entities listed by :func:`build_catalog`, created in that order.  Each
entity names the entities it depends on (a hard link needs its target,
files in ``testdir1`` need the directory) and :func:`populate_entities`
refuses to create an entity before its prerequisites.

Names, contents, attribute values and device numbers are part of the
test contract of the downstream parser.  Do NOT change them without
updating the tests that read the specimens.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import posixpath
from typing import TYPE_CHECKING, Iterable

from ..errors import PopulateError

if TYPE_CHECKING:
    from ..session import PathLike, Session

TEST_DIRECTORY = "testdir1"

# Values above the block size force ext4 to store the attribute in its
# own inode (ea_inode) instead of inline or in a shared block.
LARGE_XATTR_SIZE = 8192

SPARSE_FILE_SIZE = 1 * 1024 * 1024
UNINITIALIZED_EXTENT_SIZE = 4096


class EntityKind(enum.Enum):
    REGULAR = "regular"
    SPARSE = "sparse"
    HARDLINK = "hardlink"
    SYMLINK = "symlink"
    BLOCK_DEVICE = "device-block"
    CHAR_DEVICE = "device-char"
    FIFO = "fifo"
    DIRECTORY = "dir"
    XATTR_FILE = "xattr-file"
    XATTR_DIRECTORY = "xattr-dir"


class SparseLayout(enum.Enum):
    LEADING_HOLE = "leading-hole"
    TRAILING_HOLE = "trailing-hole"
    UNINITIALIZED = "uninitialized"


@dataclasses.dataclass(frozen=True, slots=True)
class FileEntityDescriptor:
    relative_path: PathLike
    kind: EntityKind
    content: bytes = b""
    target: str | None = None
    size: int | None = None
    layout: SparseLayout | None = None
    xattr: tuple[str, bytes] | None = None
    device: tuple[int, int] | None = None
    encrypted: bool = False
    requires: tuple[PathLike, ...] = ()


def _in_testdir(name: str) -> str:
    return posixpath.join(TEST_DIRECTORY, name)


# Literal UTF-8 byte sequences: normalization must not touch them.
NORMALIZATION_NAMES = (
    b"nfc_t\xc3\xa9stfil\xc3\xa8",        # NFC: U+00E9, U+00E8
    b"nfd_te\xcc\x81stfile\xcc\x80",      # NFD: e + U+0301, e + U+0300
    b"nfd_\xc2\xbe",                      # NFD: U+00BE has no decomposition
    b"nfkd_3\xe2\x81\x844",               # NFKD of U+00BE: 3 U+2044 4
)


def build_catalog(mount_point: str, payload: bytes) -> tuple[FileEntityDescriptor, ...]:
    """
    Return the catalog in creation order.

    Symbolic links point at absolute paths below ``mount_point``, the
    way they would on a system that mounts the specimen there.
    """
    testfile1 = _in_testdir("testfile1")
    d = FileEntityDescriptor
    K = EntityKind

    return (
        d("emptyfile", K.REGULAR),
        d(TEST_DIRECTORY, K.DIRECTORY),
        # Small enough to be stored as inline data.
        d(testfile1, K.REGULAR, content=b"My file\n",
          requires=(TEST_DIRECTORY,)),
        # Too large to be stored as inline data.
        d(_in_testdir("TestFile2"), K.REGULAR, content=payload,
          requires=(TEST_DIRECTORY,)),
        d("file_hardlink1", K.HARDLINK, target=testfile1,
          requires=(testfile1,)),
        d("file_symboliclink1", K.SYMLINK,
          target=posixpath.join(mount_point, testfile1),
          requires=(testfile1,)),
        # Directories cannot be hard linked, only symbolically.
        d("directory_symboliclink1", K.SYMLINK,
          target=posixpath.join(mount_point, TEST_DIRECTORY),
          requires=(TEST_DIRECTORY,)),
        *(d(name, K.REGULAR) for name in NORMALIZATION_NAMES),
        d(_in_testdir("xattr1"), K.XATTR_FILE,
          xattr=("user.myxattr1", b"My 1st extended attribute"),
          requires=(TEST_DIRECTORY,)),
        d(_in_testdir("xattr2"), K.XATTR_DIRECTORY,
          xattr=("user.myxattr2", b"My 2nd extended attribute"),
          requires=(TEST_DIRECTORY,)),
        d(_in_testdir("initial_sparse1"), K.SPARSE,
          content=b"File with an initial sparse extent\n",
          size=SPARSE_FILE_SIZE, layout=SparseLayout.LEADING_HOLE,
          requires=(TEST_DIRECTORY,)),
        d(_in_testdir("trailing_sparse1"), K.SPARSE,
          content=b"File with a trailing sparse extent\n",
          size=SPARSE_FILE_SIZE, layout=SparseLayout.TRAILING_HOLE,
          requires=(TEST_DIRECTORY,)),
        d(_in_testdir("uninitialized1"), K.SPARSE,
          content=b"File with an uninitialized extent\n",
          size=UNINITIALIZED_EXTENT_SIZE, layout=SparseLayout.UNINITIALIZED,
          requires=(TEST_DIRECTORY,)),
        d(_in_testdir("blockdev1"), K.BLOCK_DEVICE, device=(24, 57),
          requires=(TEST_DIRECTORY,)),
        d(_in_testdir("chardev1"), K.CHAR_DEVICE, device=(13, 68),
          requires=(TEST_DIRECTORY,)),
        d(_in_testdir("pipe1"), K.FIFO, requires=(TEST_DIRECTORY,)),
    )


def large_xattr_entity(payload: bytes) -> FileEntityDescriptor:
    return FileEntityDescriptor(
        _in_testdir("large_xattr"), EntityKind.XATTR_FILE,
        xattr=("user.mylargexattr", payload[:LARGE_XATTR_SIZE]),
        requires=(TEST_DIRECTORY,),
    )


ENCRYPTED_DIRECTORY = "encrypteddir1"

ENCRYPTED_ENTITIES = (
    FileEntityDescriptor(ENCRYPTED_DIRECTORY, EntityKind.DIRECTORY,
                         encrypted=True),
    FileEntityDescriptor(posixpath.join(ENCRYPTED_DIRECTORY, "encryptedfile1"),
                         EntityKind.REGULAR, content=b"Super secret\n",
                         requires=(ENCRYPTED_DIRECTORY,)),
)


def _set_xattr(session: Session, entity: FileEntityDescriptor) -> None:
    name, value = entity.xattr
    session.set_xattr(entity.relative_path, name, value)
    if session.get_xattr(entity.relative_path, name) != value:
        raise PopulateError(
            f"Extended attribute {name} of {entity.relative_path!r} "
            "does not read back as written"
        )


def create_entity(session: Session, entity: FileEntityDescriptor,
                  policy: str | None = None) -> None:
    """Create one entity; any failure propagates and ends the run."""
    path = entity.relative_path
    kind = entity.kind

    if kind is EntityKind.REGULAR:
        if entity.content:
            session.write(path, entity.content)
        else:
            session.touch(path)

    elif kind is EntityKind.DIRECTORY:
        session.mkdir(path)
        if entity.encrypted:
            if policy is None:
                raise PopulateError(f"No encryption policy for {path!r}")
            session.set_encryption_policy(path, policy)

    elif kind is EntityKind.HARDLINK:
        session.link(entity.target, path)

    elif kind is EntityKind.SYMLINK:
        session.symlink(entity.target, path)

    elif kind is EntityKind.XATTR_FILE:
        session.touch(path)
        _set_xattr(session, entity)

    elif kind is EntityKind.XATTR_DIRECTORY:
        session.mkdir(path)
        _set_xattr(session, entity)

    elif kind is EntityKind.SPARSE:
        if entity.layout is SparseLayout.LEADING_HOLE:
            session.truncate(path, entity.size)
            session.append(path, entity.content)
        elif entity.layout is SparseLayout.TRAILING_HOLE:
            session.write(path, entity.content)
            session.truncate(path, entity.size)
        else:
            session.allocate(path, entity.size)
            session.append(path, entity.content)

    elif kind is EntityKind.BLOCK_DEVICE:
        session.make_device(path, "b", *entity.device)

    elif kind is EntityKind.CHAR_DEVICE:
        session.make_device(path, "c", *entity.device)

    elif kind is EntityKind.FIFO:
        session.make_fifo(path)

    else:
        raise PopulateError(f"Unknown entity kind {kind}")


def populate_entities(
    session: Session,
    entities: Iterable[FileEntityDescriptor],
    created: set[PathLike],
    policy: str | None = None,
) -> list[FileEntityDescriptor]:
    """
    Create ``entities`` in order, recording each path in ``created``.

    ``created`` is shared by all steps of a job so later steps can rely
    on entities made by earlier ones.
    """
    done = []
    for entity in entities:
        missing = [r for r in entity.requires if r not in created]
        if missing:
            raise PopulateError(
                f"{entity.relative_path!r} requires {missing!r} "
                "which has not been created"
            )
        logging.debug("Creating %s %r", entity.kind.value, entity.relative_path)
        create_entity(session, entity, policy)
        created.add(entity.relative_path)
        done.append(entity)
    return done


def populate_catalog(session: Session, payload: bytes,
                     created: set[PathLike]) -> list[FileEntityDescriptor]:
    return populate_entities(
        session, build_catalog(session.mount_point, payload), created
    )


def populate_large_xattr(session: Session, payload: bytes,
                         created: set[PathLike]) -> list[FileEntityDescriptor]:
    if len(payload) < LARGE_XATTR_SIZE:
        raise PopulateError(
            f"Payload has only {len(payload)} bytes, "
            f"the large attribute needs {LARGE_XATTR_SIZE}"
        )
    return populate_entities(session, [large_xattr_entity(payload)], created)


def populate_encrypted(session: Session,
                       created: set[PathLike]) -> list[FileEntityDescriptor]:
    """
    Create an encrypted directory holding one file.

    The policy comes from the key loaded into the session keyring;
    without one the step fails.
    """
    session.add_encryption_key()
    policy = session.encryption_policy()
    logging.info("Using encryption policy %s", policy)
    return populate_entities(session, ENCRYPTED_ENTITIES, created, policy)
