#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

from . import execs
from . import fields
