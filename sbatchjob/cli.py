#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023-2024 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

import sys
import argparse
from pathlib import Path

import toml

from .config import Defaults
from .errors import SbatchJobError
from .job import SlurmJob
from .render import render_script
from .submit import sbatch, write_slurm_script, SubmitResult
from .utils import configure_logger, load_conf, logger


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sbatchjob", description="Render Slurm batch scripts from TOML/JSON job files and submit them")
    parser.add_argument("jobfile", action="store", type=str, nargs="?", help="TOML or JSON job description")
    parser.add_argument("-o", "--out", action="store", type=str, help="Write the script to this path instead of printing it")
    parser.add_argument("--submit", action="store_true", help="Submit the script with sbatch")
    parser.add_argument("--dry-run", action="store_true", help="With --submit: write the script, but do not call sbatch")
    parser.add_argument("--check", action="store_true", help="Only validate the job description")
    parser.add_argument("--cwd", action="store", type=str, help="Directory to look for sbatchjob.toml/json in. Default: cwd")
    parser.add_argument("--remote", action="store_true", help="Submit via the remote host from configuration")
    parser.add_argument("--genconf", action="store_true", help="Print configuration with defaults as TOML and exit")
    parser.add_argument("--debug", action="store_true", help="Debug. Default: False")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = make_parser().parse_args(argv)
    configure_logger('screen', debug=args.debug)

    cwd = Path.cwd()
    if args.cwd is not None:
        cwd = Path(args.cwd).resolve()

    try:
        defaults = Defaults.load(cwd)

        if args.genconf:
            print(toml.dumps(defaults.dump_schema()))
            return 0

        if args.jobfile is None:
            logger.error("No job file specified")
            return 2

        jobfile = Path(args.jobfile)
        if not jobfile.exists():
            logger.error(f"Job file does not exist: {jobfile.as_posix()}")
            return 2
        data = load_conf(jobfile)
        if data is None:
            logger.error(f"Unable to parse job file: {jobfile.as_posix()}")
            return 1
        job = SlurmJob.from_schema(data, defaults)

        if args.check:
            job.validate()
            job.log()
            logger.info("Configuration OK")
            return 0

        if args.submit:
            if args.remote:
                if defaults.remote is None:
                    logger.error("No remote host configured")
                    return 1
                defaults.remote.apply()
            result = sbatch(job, args.out, dry_run=args.dry_run, execs=defaults.execs)
            if isinstance(result, SubmitResult):
                print(result.stdout)
            else:
                print(result.as_posix())
            return 0

        if args.out is not None:
            write_slurm_script(job, args.out)
            return 0

        print("\n".join(render_script(job)))
    except SbatchJobError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
