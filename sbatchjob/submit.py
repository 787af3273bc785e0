#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023-2024 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

import os
import tempfile
import subprocess
from pathlib import Path
from dataclasses import dataclass

from paramiko import SSHException

from .errors import ScriptWriteError, SubmissionFailure, TypeMismatch
from .execs import Execs
from .job import SlurmJob
from .render import render_script
from .utils import shell, logger


@dataclass
class SubmitResult:
    script: Path
    stdout: str
    stderr: str


def write_slurm_script(job: SlurmJob, path: str | Path) -> Path:
    if not isinstance(job, SlurmJob):
        raise TypeMismatch(f"Expected a SlurmJob object, got {type(job).__name__}")

    path = Path(path)
    lines = render_script(job)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n")
    except OSError as e:
        logger.error(f"Unable to write script to {path.as_posix()}")
        logger.exception(e)
        raise ScriptWriteError(f"Unable to write script to {path.as_posix()}: {e}") from e

    logger.info(f"Script written to: {path.as_posix()}")
    return path


def _tmp_script() -> Path:
    fd, name = tempfile.mkstemp(prefix="sbatchjob_", suffix=".sh")
    os.close(fd)
    return Path(name)


def sbatch(job: SlurmJob, script: str | Path | None = None, dry_run: bool = False, execs: Execs | None = None) -> Path | SubmitResult:
    """Writes the job script and submits it with sbatch

    Args:
        job (SlurmJob): job to submit
        script (str | Path | None): where to write the script. Defaults to a fresh temporary file.
        dry_run (bool): only write the script, do not call sbatch. Defaults to False.
        execs (Execs | None): executables to use. Defaults to Execs().

    Raises:
        SubmissionFailure: sbatch is missing, could not be run or returned non-zero exitcode

    Returns:
        Path: script path in dry-run mode
        SubmitResult: script path and sbatch output otherwise
    """
    if not isinstance(job, SlurmJob):
        raise TypeMismatch(f"Expected a SlurmJob object, got {type(job).__name__}")
    if execs is None: execs = Execs()

    if script is None:
        # no temporary file for a job that does not render
        render_script(job)
        tmp = _tmp_script()
        try:
            path = write_slurm_script(job, tmp)
        except ScriptWriteError:
            tmp.unlink(missing_ok=True)
            raise
    else:
        path = write_slurm_script(job, script)

    if dry_run:
        logger.info(f"Dry run - script written to: {path.as_posix()}")
        return path

    if shell.local and not execs.check():
        raise SubmissionFailure(f"Executable {execs.sbatch} not found")

    job.log()
    logger.info("Submitting job...")
    try:
        shell.put(path, path.as_posix())
        bout, berr = shell.exec([execs.sbatch, path.as_posix()])
    except subprocess.CalledProcessError as e:
        raise SubmissionFailure(f"{execs.sbatch} returned non-zero exitcode: {e.returncode}") from e
    except (OSError, SSHException) as e:
        logger.error(f"Unable to run {execs.sbatch}")
        logger.exception(e)
        raise SubmissionFailure(f"Unable to run {execs.sbatch}: {e}") from e

    logger.info(f"{execs.sbatch}: {bout}")
    return SubmitResult(path, bout, berr)


if __name__ == "__main__":
    pass
