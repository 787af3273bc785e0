#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023-2024 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17


class SbatchJobError(Exception):
    pass


class InvalidInput(SbatchJobError, ValueError):
    pass


class IndexOutOfRange(SbatchJobError, IndexError):
    pass


class ConflictingOptions(SbatchJobError, ValueError):
    names: tuple[str, ...]

    def __init__(self, *names: str) -> None:
        self.names = names
        super().__init__("Use only one of " + " or ".join(f"`{name}`" for name in names))


class TypeMismatch(SbatchJobError, TypeError):
    pass


class ScriptWriteError(SbatchJobError, OSError):
    pass


class SubmissionFailure(SbatchJobError, RuntimeError):
    pass


class ConfigurationError(SbatchJobError, RuntimeError):
    pass


if __name__ == "__main__":
    pass
