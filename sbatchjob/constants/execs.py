#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

sbatch: str = 'sbatch'  # this can be overriden at runtime

if __name__ == "__main__":
    pass
