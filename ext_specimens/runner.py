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
The run loop.

:func:`generate` checks everything that can be checked up front (the
toolchain, the Unicode database, the payload, the output directory),
then builds the selected jobs one after the other.  A job allocates and
formats its image, opens the one mount session of the run, executes its
population steps in order and closes the session before the next job
starts.  The first error ends the run; the open session is still
unmounted on the way out.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

from .backends import get_backend
from .errors import ConfigurationError, OutputExistsError
from .image import build_image, finalize
from .matrix import Populator, SpecimenJob, expand, select
from .payload import load_payload
from .populators import (
    HUGE_FILE_TIERS,
    STANDARD_TIERS,
    populate_catalog,
    populate_encrypted,
    populate_large_xattr,
    populate_many_files,
    populate_sparse,
    populate_unicode,
    read_code_points,
)
from .preflight import check_toolchain
from .session import MountPoint
from .tables import MATRICES

if TYPE_CHECKING:
    from .backends import Backend
    from .config import Config
    from .session import PathLike, Session


def load_jobs(config: Config) -> list[SpecimenJob]:
    definitions = []
    for name in config.matrices:
        try:
            definitions.extend(MATRICES[name])
        except KeyError:
            raise ConfigurationError(f"Unknown matrix: {name}") from None

    jobs = select(expand(definitions), config.only)
    if not jobs:
        raise ConfigurationError(
            f"No specimen matches {', '.join(config.only)}"
        )
    return jobs


def describe(job: SpecimenJob) -> str:
    steps = ",".join(p.value for p in job.populators)
    return (f"{job.artifact_name}: {job.total_size} bytes, "
            f"mke2fs {' '.join(job.formatter_options())}, steps {steps}")


def run_step(
    step: Populator,
    job: SpecimenJob,
    session: Session,
    created: set[PathLike],
    payload: bytes,
    code_points: Optional[Sequence[int]],
) -> None:
    if step is Populator.CATALOG:
        populate_catalog(session, payload, created)
    elif step is Populator.LARGE_XATTR:
        populate_large_xattr(session, payload, created)
    elif step is Populator.ENCRYPTED:
        populate_encrypted(session, created)
    elif step is Populator.MANY_FILES:
        populate_many_files(session, job.file_count, created)
    elif step is Populator.SPARSE:
        populate_sparse(session, STANDARD_TIERS)
    elif step is Populator.HUGE_SPARSE:
        populate_sparse(session, HUGE_FILE_TIERS)
    elif step is Populator.UNICODE:
        if code_points is None:
            raise ConfigurationError("No Unicode database loaded")
        populate_unicode(session, code_points)
    else:
        raise ConfigurationError(f"Unknown population step: {step}")


def run_job(
    job: SpecimenJob,
    backend: Backend,
    mount_point: MountPoint,
    output_dir: Path,
    payload: bytes,
    code_points: Optional[Sequence[int]] = None,
) -> Path:
    logging.info("Building %s", job.artifact_name)
    store = build_image(backend, job, output_dir)

    created: set[PathLike] = set()
    with mount_point.session(store) as session:
        for step in job.populators:
            logging.debug("%s: %s", job.name, step.value)
            run_step(step, job, session, created, payload, code_points)

    final = finalize(store)
    logging.info("Image ready: %s", final)
    return final


def generate(config: Config, backend: Optional[Backend] = None) -> list[Path]:
    """Build every selected specimen; return the artifact paths in order."""
    jobs = load_jobs(config)

    if config.dry_run:
        for job in jobs:
            print(describe(job))
        return []

    if backend is None:
        backend = get_backend(config.backend, config)
    check_toolchain(backend.required_tools(jobs))

    code_points = None
    if any(job.needs(Populator.UNICODE) for job in jobs):
        if not config.unicode_data.is_file():
            raise ConfigurationError(
                f"Missing Unicode database: {config.unicode_data}"
            )
        code_points = read_code_points(config.unicode_data)

    payload = load_payload(config.payload)

    output_dir = config.output_dir
    if output_dir.exists():
        raise OutputExistsError(
            f"Specimens directory: {output_dir} already exists."
        )
    output_dir.mkdir(parents=True)

    mount_point = MountPoint(backend, config.mount_point)
    artifacts = [
        run_job(job, backend, mount_point, output_dir, payload, code_points)
        for job in jobs
    ]
    logging.info("Generated %d specimens in %s", len(artifacts), output_dir)
    return artifacts
