#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023-2024 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

import inspect
from typing import Any, Callable, Iterable, Mapping, Literal
from dataclasses import dataclass, field

from marshmallow import Schema, fields, post_load, ValidationError

from .config import Defaults, DEFAULT_SHEBANG, DEFAULT_DIRECTIVE, DEFAULT_SAFETY
from .errors import InvalidInput, IndexOutOfRange, ConflictingOptions, TypeMismatch
from .utils import logger
from . import constants as cs


Lines = str | Iterable[str] | Callable[[], str | Iterable[str]] | None
Position = Literal["start", "end"] | int

conflicting_pairs: tuple[tuple[str, str], ...] = (
    (cs.fields.mem, cs.fields.mem_per_cpu),
    (cs.fields.ntasks, cs.fields.ntasks_per_node),
)


class _Unset:
    def __repr__(self) -> str: return "<unset>"


UNSET: Any = _Unset()


def _is_line(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def normalize_lines(content: Lines, what: str = "body") -> list[str]:
    """Turns a string, a sequence of strings or a function returning either into a list of lines.

    A function is called right away, without arguments.
    """
    if callable(content):
        content = content()
    if content is None:
        return []
    if _is_line(content):
        return [str(content)]
    if isinstance(content, (bytes, bytearray, Mapping, set, frozenset)) or not isinstance(content, Iterable):
        raise InvalidInput(f"{what} must be a string, a sequence of strings or a function returning one, got {type(content).__name__}")

    lines: list[str] = []
    for i, line in enumerate(content):
        if not _is_line(line):
            raise InvalidInput(f"{what} element {i + 1} cannot be used as a command line: {line!r}")
        lines.append(str(line))
    return lines


@dataclass
class SlurmJob:
    shebang: str = DEFAULT_SHEBANG
    options: dict[str, Any] = field(default_factory=dict)
    body: list[str] = field(default_factory=list)
    directive: str = DEFAULT_DIRECTIVE
    safety: str = DEFAULT_SAFETY

    def _evolve(self, options: dict[str, Any] | None = None, body: list[str] | None = None) -> "SlurmJob":
        return SlurmJob(
            shebang=self.shebang,
            options=dict(self.options if options is None else options),
            body=list(self.body if body is None else body),
            directive=self.directive,
            safety=self.safety,
        )

    def set_mem(self, mem: str | int | None) -> "SlurmJob":
        return self.set_opt({cs.fields.mem: mem})

    def set_time(self, time: str | int | None) -> "SlurmJob":
        return self.set_opt({cs.fields.time: time})

    def set_cpus(self, cpus: int | None) -> "SlurmJob":
        return self.set_opt({cs.fields.cpus: cpus})

    def set_partition(self, partition: str | None) -> "SlurmJob":
        return self.set_opt({cs.fields.partition: partition})

    def set_job_name(self, name: str | None) -> "SlurmJob":
        return self.set_opt({cs.fields.job_name: name})

    def set_opt(self, opts: Mapping[str, Any] | None = None, /, **kwargs: Any) -> "SlurmJob":
        """Sets arbitrary options, overwriting existing ones.

        Names that are not valid identifiers (e.g. ``-o``) go through the mapping argument.
        Setting an option to None keeps the name but drops it from the rendered script.
        """
        merged: dict[str, Any] = {}
        if opts is not None:
            if not isinstance(opts, Mapping):
                raise InvalidInput(f"Options must be given as a mapping, got {type(opts).__name__}")
            merged.update(opts)
        merged.update(kwargs)
        for name in merged:
            if not isinstance(name, str) or name == "":
                raise InvalidInput(f"Option name must be a non-empty string, got {name!r}")

        options = dict(self.options)
        options.update(merged)
        return self._evolve(options=options)

    def add_body(self, content: Lines, where: Position = "end") -> "SlurmJob":
        """Adds command lines to the body.

        Args:
            content (Lines): line(s) to add, or a function returning them
            where (Position): "start", "end" or 1-based index of the first added line. Defaults to "end".

        Raises:
            InvalidInput: content is not usable as lines or `where` is not a position
            IndexOutOfRange: numeric `where` outside of [1, len(body) + 1]

        Returns:
            SlurmJob: job with updated body
        """
        lines = normalize_lines(content, "content")
        if len(lines) == 0:
            return self

        if isinstance(where, bool) or not isinstance(where, (str, int)):
            raise InvalidInput(f"Position must be 'start', 'end' or an integer, got {where!r}")
        if isinstance(where, str):
            if where == "start": index = 0
            elif where == "end": index = len(self.body)
            else: raise InvalidInput(f"Position must be 'start', 'end' or an integer, got {where!r}")
        else:
            if not 1 <= where <= len(self.body) + 1:
                raise IndexOutOfRange(f"Position {where} is out of range [1, {len(self.body) + 1}]")
            index = where - 1

        return self._evolve(body=self.body[:index] + lines + self.body[index:])

    def validate(self) -> bool:
        return validate_slurm(self)

    def _described_options(self) -> list[str]:
        from .render import format_directive, slurm_flag

        described: list[str] = []
        for name, value in self.options.items():
            try:
                d = format_directive(name, value)
            except InvalidInput:
                # shown as is, rendering reports the error
                d = f"{slurm_flag(name)}={value!r}"
            if d is not None:
                described.append(d)
        return described

    def __str__(self) -> str:
        out = ["<slurm_job>", ""]
        directives = self._described_options()
        if len(directives) > 0:
            out.append("SBATCH options:")
            out.extend(f"  {d}" for d in directives)
        else:
            out.append("SBATCH options: <none>")

        out.extend(["", "Body:"])
        if len(self.body) == 0:
            out.append("  <empty>")
        else:
            out.extend(f"  {line}" for line in self.body)
        return "\n".join(out)

    def log(self) -> None:
        props: list[tuple[str, Any]] = [("Shebang: ", self.shebang)]
        for d in self._described_options():
            props.append(("Option:  ", d))
        for line in self.body:
            props.append(("Body:    ", line))

        logger.info("Current configured job:")
        for i, el in enumerate(props):
            prefix = "├─"
            if i == 0:
                prefix = "┌─"
            if i == len(props) - 1:
                prefix = "└─"
            logger.info(f"{prefix}{el[0]}{el[1]}")

    @classmethod
    def from_schema(cls, data: dict[str, Any], defaults: Defaults | None = None) -> "SlurmJob":
        """Loads a job from plain data, e.g. a parsed TOML/JSON job file.

        Missing shebang, directive marker, safety line and log paths are taken from `defaults`;
        an explicit null log path disables it.
        """
        if not isinstance(data, Mapping):
            raise InvalidInput(f"Job description must be a mapping, got {type(data).__name__}")
        if defaults is None: defaults = Defaults()
        raw_options = data.get(cs.fields.options) or {}
        if not isinstance(raw_options, Mapping):
            raise InvalidInput(f"Job options must be a mapping, got {type(raw_options).__name__}")
        options = dict(raw_options)
        for name, default in ((cs.fields.output, defaults.output), (cs.fields.error, defaults.error)):
            if name not in options and default is not None:
                options[name] = default

        prefilled = {
            cs.fields.shebang: defaults.shebang,
            cs.fields.directive: defaults.directive,
            cs.fields.safety: defaults.safety,
        }
        prefilled.update(data)
        prefilled[cs.fields.options] = options

        try:
            job = SlurmJobSchema().load(prefilled)
        except ValidationError as e:
            raise InvalidInput(f"Invalid job description: {e.messages}") from e
        if not isinstance(job, SlurmJob):
            raise ValueError(f"Unable to load {cls.__name__} from data (dev bug:{__file__}:{inspect.currentframe().f_code.co_name})")  # type: ignore
        return job

    def dump_schema(self) -> dict[str, Any]:
        data = SlurmJobSchema().dump(self)
        if not isinstance(data, dict):
            raise ValueError(f"Unable to dump {self.__class__.__name__} to data (dev bug:{__file__}:{inspect.currentframe().f_code.co_name})")  # type: ignore
        return data


class FieldLines(fields.Field):
    def _deserialize(self, value: Any, attr, data, **kwargs) -> list[str]:
        try:
            return normalize_lines(value)
        except InvalidInput as e:
            raise ValidationError(str(e)) from e

    def _serialize(self, value: list[str], attr, obj, **kwargs) -> list[str]:
        return list(value)


class SlurmJobSchema(Schema):
    shebang = fields.String(load_default=DEFAULT_SHEBANG)
    options = fields.Dict(keys=fields.String(), values=fields.Raw(allow_none=True), load_default=dict)
    body = FieldLines(load_default=list)
    directive = fields.String(load_default=DEFAULT_DIRECTIVE)
    safety = fields.String(load_default=DEFAULT_SAFETY)

    @post_load
    def make_job(self, data, **kwargs) -> SlurmJob:
        return SlurmJob(**data)


def slurm_job(
    body: Lines = None,
    job_name: str | None = None,
    partition: str | None = None,
    time: str | int | None = None,
    mem: str | int | None = None,
    cpus: int | None = None,
    nodes: int | str | None = None,
    output: str | None = UNSET,
    error: str | None = UNSET,
    shebang: str | None = None,
    validate: bool = False,
    defaults: Defaults | None = None,
    **extra: Any,
) -> SlurmJob:
    """Creates a Slurm job.

    Any keyword not listed here becomes an option as is, e.g. ``mail_user="me@example.org"``
    renders as ``--mail-user=me@example.org``. Options given as None are left out.
    Validation always happens on rendering and submission; `validate` adds a check right here.

    Raises:
        InvalidInput: body is not a string, a sequence of strings or a function returning one
        ConflictingOptions: `validate` is set and mutually exclusive options are given
    """
    if defaults is None: defaults = Defaults()

    lines = normalize_lines(body)

    opts: dict[str, Any] = {
        cs.fields.job_name: job_name,
        cs.fields.partition: partition,
        cs.fields.time: time,
        cs.fields.mem: mem,
        cs.fields.cpus: cpus,
        cs.fields.nodes: nodes,
        cs.fields.output: defaults.output if output is UNSET else output,
        cs.fields.error: defaults.error if error is UNSET else error,
    }
    opts.update(extra)

    job = SlurmJob(
        shebang=defaults.shebang if shebang is None else shebang,
        options={name: value for name, value in opts.items() if value is not None},
        body=lines,
        directive=defaults.directive,
        safety=defaults.safety,
    )
    if validate: validate_slurm(job)
    return job


def validate_slurm(job: SlurmJob) -> bool:
    if not isinstance(job, SlurmJob):
        raise TypeMismatch(f"Expected a SlurmJob object, got {type(job).__name__}")

    o = job.options
    for first, second in conflicting_pairs:
        if o.get(first) is not None and o.get(second) is not None:
            logger.error(f"Conflicting options: `{first}` and `{second}`")
            raise ConflictingOptions(first, second)

    return True


if __name__ == "__main__":
    pass
