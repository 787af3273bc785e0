#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023-2024 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

import inspect
from typing import Any
from dataclasses import dataclass

from marshmallow import Schema, fields, post_load

from .utils import is_exe, logger
from . import constants as cs


@dataclass
class Execs:
    sbatch: str = cs.execs.sbatch

    def check(self) -> bool:
        for exec in [self.sbatch]:
            if not is_exe(exec):
                logger.error(f"Executable {exec} not found")
                return False
        return True

    @classmethod
    def from_schema(cls, data: dict[str, Any]) -> "Execs":
        execs = ExecsSchema().load(data)
        if not isinstance(execs, Execs): raise ValueError(f"Unable to load {cls.__name__} from data (dev bug:{__file__}:{inspect.currentframe().f_code.co_name})")  # type: ignore
        return execs

    def dump_schema(self) -> dict[str, Any]:
        data = ExecsSchema().dump(self)
        if not isinstance(data, dict): raise ValueError(f"Unable to dump {self.__class__.__name__} to data (dev bug:{__file__}:{inspect.currentframe().f_code.co_name})")  # type: ignore
        return data


class ExecsSchema(Schema):
    sbatch = fields.String(load_default=cs.execs.sbatch)

    @post_load
    def make_execs_conf(self, data, **kwargs) -> Execs: return Execs(**data)

if __name__ == "__main__":
    pass
