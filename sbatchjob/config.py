#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023-2024 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

import os
import inspect
from typing import Any
from pathlib import Path
from dataclasses import dataclass, field

from marshmallow import Schema, fields, post_load, validate, ValidationError

from .utils import Shell, shell, FieldPath, load_conf, logger
from .execs import Execs, ExecsSchema
from .errors import ConfigurationError


DEFAULT_SHEBANG: str = "#!/bin/bash"
DEFAULT_DIRECTIVE: str = "#SBATCH "
DEFAULT_SAFETY: str = "set -euo pipefail"
DEFAULT_OUTPUT: str = "logs/%x_%j.out"
DEFAULT_ERROR: str = "logs/%x_%j.err"

conf_env_var: str = "SBATCHJOB_USR_CONF_PATH"
conf_basename: str = "sbatchjob"


@dataclass
class RemoteConf:
    host: str
    username: str
    port: int = 22
    authmeth: Shell.AuthMeth = Shell.AuthMeth.NOPASS
    password: str | None = None
    keyfile: Path | None = None

    def apply(self) -> None:
        """Points the package shell at this host, so that submission runs there"""
        logger.info(f"Using remote shell: {self.username}@{self.host}:{self.port} ({self.authmeth})")
        shell.configure(
            local=False,
            host=self.host,
            port=self.port,
            authmeth=self.authmeth,
            username=self.username,
            password=self.password,
            keyfile=self.keyfile,
        )


class RemoteConfSchema(Schema):
    host = fields.String(required=True)
    username = fields.String(required=True)
    port = fields.Integer(load_default=22, validate=validate.Range(min=1, max=65535))
    authmeth = fields.Enum(Shell.AuthMeth, by_value=True, load_default=Shell.AuthMeth.NOPASS)
    password = fields.String(allow_none=True, load_default=None)
    keyfile = FieldPath(allow_none=True, load_default=None)

    @post_load
    def make_remote_conf(self, data, **kwargs) -> RemoteConf: return RemoteConf(**data)


@dataclass
class Defaults:
    shebang: str = DEFAULT_SHEBANG
    directive: str = DEFAULT_DIRECTIVE
    safety: str = DEFAULT_SAFETY
    output: str | None = DEFAULT_OUTPUT
    error: str | None = DEFAULT_ERROR
    execs: Execs = field(default_factory=Execs)
    remote: RemoteConf | None = None

    @classmethod
    def from_schema(cls, data: dict[str, Any]) -> "Defaults":
        try:
            defaults = DefaultsSchema().load(data)
        except ValidationError as e:
            logger.error(f"Invalid configuration: {e.messages}")
            raise ConfigurationError(f"Invalid configuration: {e.messages}") from e
        if not isinstance(defaults, Defaults):
            raise ValueError(f"Unable to load {cls.__name__} from data (dev bug:{__file__}:{inspect.currentframe().f_code.co_name})")  # type: ignore
        return defaults

    def dump_schema(self) -> dict[str, Any]:
        data = DefaultsSchema().dump(self)
        if not isinstance(data, dict):
            raise ValueError(f"Unable to dump {self.__class__.__name__} to data (dev bug:{__file__}:{inspect.currentframe().f_code.co_name})")  # type: ignore
        return data

    @classmethod
    def load_base_conf(cls) -> dict[str, Any] | None:
        conf_path_str = os.getenv(conf_env_var)
        if conf_path_str is not None:
            conf_path = Path(conf_path_str).expanduser()
            if not conf_path.exists():
                raise ConfigurationError(f"{conf_env_var} points to nonexistent file: {conf_path.as_posix()}")
            return cls._read(conf_path)
        return cls._load_first(Path("~/.config").expanduser())

    @classmethod
    def load_current_conf(cls, cwd: Path | None = None) -> dict[str, Any] | None:
        if cwd is None: cwd = Path.cwd()
        return cls._load_first(cwd)

    @staticmethod
    def _read(conf_path: Path) -> dict[str, Any]:
        conf = load_conf(conf_path)
        if conf is None:
            raise ConfigurationError(f"Unable to parse configuration file: {conf_path.as_posix()}")
        if not isinstance(conf, dict):
            raise ConfigurationError(f"Configuration file must hold a table, got {type(conf).__name__}: {conf_path.as_posix()}")
        return conf

    @classmethod
    def _load_first(cls, folder: Path) -> dict[str, Any] | None:
        for suffix in (".json", ".toml"):
            conf_path = folder / f"{conf_basename}{suffix}"
            if conf_path.exists():
                logger.debug(f"Reading configuration from {conf_path.as_posix()}")
                return cls._read(conf_path)
        return None

    @classmethod
    def load(cls, cwd: Path | None = None) -> "Defaults":
        if cwd is None: cwd = Path.cwd()
        base_conf = cls.load_base_conf()
        curr_conf = cls.load_current_conf(cwd)
        conf = {}
        if base_conf is not None:
            conf.update(base_conf)
        if curr_conf is not None:
            conf.update(curr_conf)
        return cls.from_schema(conf)


class DefaultsSchema(Schema):
    shebang = fields.String(load_default=DEFAULT_SHEBANG)
    directive = fields.String(load_default=DEFAULT_DIRECTIVE)
    safety = fields.String(load_default=DEFAULT_SAFETY)
    output = fields.String(allow_none=True, load_default=DEFAULT_OUTPUT)
    error = fields.String(allow_none=True, load_default=DEFAULT_ERROR)
    execs = fields.Nested(ExecsSchema, load_default=Execs)
    remote = fields.Nested(RemoteConfSchema, allow_none=True, load_default=None)

    @post_load
    def make_defaults(self, data, **kwargs) -> Defaults:
        return Defaults(**data)


if __name__ == "__main__":
    pass
