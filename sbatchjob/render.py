#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023-2024 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

from typing import Any, Mapping

from .config import DEFAULT_DIRECTIVE
from .errors import InvalidInput, TypeMismatch
from .job import SlurmJob, validate_slurm
from .utils import logger
from . import constants as cs


flags: dict[str, str] = {
    cs.fields.job_name: "--job-name",
    cs.fields.partition: "--partition",
    cs.fields.time: "--time",
    cs.fields.mem: "--mem",
    cs.fields.cpus: "--cpus-per-task",
    cs.fields.nodes: "--nodes",
    cs.fields.mem_per_cpu: "--mem-per-cpu",
    cs.fields.ntasks_per_node: "--ntasks-per-node",
    cs.fields.output: "--output",
    cs.fields.error: "--error",
    cs.fields.output_short: "-o",
    cs.fields.error_short: "-e",
    cs.fields.array: "--array",
}


def slurm_flag(name: str) -> str:
    return flags.get(name, "--" + name.replace("_", "-"))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _scalar(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_value(name: str, value: Any) -> str | None:
    """Returns the directive value of an option, None when the option has no value to render"""
    if isinstance(value, (Mapping, set, frozenset)):
        raise InvalidInput(f"Option `{name}` has unsupported value type: {type(value).__name__}")
    if not isinstance(value, (list, tuple, range)):
        # a lone array index is the same as a one-element array
        if name == cs.fields.array and _is_number(value):
            return f"{_scalar(value)}-{_scalar(value)}"
        return _scalar(value)

    items = list(value)
    if len(items) == 0:
        return None
    for item in items:
        if isinstance(item, (list, tuple, range, Mapping, set, frozenset)):
            raise InvalidInput(f"Option `{name}` contains a nested collection: {item!r}")

    # min-max on purpose, gaps in the array are not kept
    if name == cs.fields.array and all(_is_number(item) for item in items):
        return f"{_scalar(min(items))}-{_scalar(max(items))}"

    return ",".join(_scalar(item) for item in items)


def format_directive(name: str, value: Any) -> str | None:
    """Returns `flag` or `flag=value` for an option, None when nothing has to be rendered"""
    if value is None or value is False:
        return None

    flag = slurm_flag(name)
    if value is True:
        return flag

    formatted = format_value(name, value)
    if formatted is None:
        logger.debug(f"Option `{name}` is an empty collection, skipping")
        return None
    return f"{flag}={formatted}"


def render_sbatch(opts: Mapping[str, Any], directive: str = DEFAULT_DIRECTIVE) -> list[str]:
    lines: list[str] = []

    for name in sorted(opts):
        d = format_directive(name, opts[name])
        if d is None:
            continue
        lines.append(f"{directive}{d}")

    return lines


def render_script(job: SlurmJob) -> list[str]:
    if not isinstance(job, SlurmJob):
        raise TypeMismatch(f"Expected a SlurmJob object, got {type(job).__name__}")

    validate_slurm(job)

    lines = [
        job.shebang,
        *render_sbatch(job.options, job.directive),
        "",
        job.safety,
        "",
        *job.body,
    ]
    logger.debug(f"Rendered script: {len(lines)} lines, {len(lines) - len(job.body) - 4} directives")
    return lines


if __name__ == "__main__":
    pass
