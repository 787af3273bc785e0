#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

from .utils import configure_logger, shell
from .config import Defaults, RemoteConf
from .execs import Execs
from .errors import (
    SbatchJobError,
    InvalidInput,
    IndexOutOfRange,
    ConflictingOptions,
    TypeMismatch,
    ScriptWriteError,
    SubmissionFailure,
    ConfigurationError,
)
from .job import SlurmJob, slurm_job, validate_slurm
from .render import slurm_flag, render_sbatch, render_script
from .submit import SubmitResult, write_slurm_script, sbatch
from . import utils
