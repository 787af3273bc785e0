#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

job_name: str = 'job_name'
partition: str = 'partition'
time: str = 'time'
mem: str = 'mem'
cpus: str = 'cpus'
nodes: str = 'nodes'
mem_per_cpu: str = 'mem_per_cpu'
ntasks: str = 'ntasks'
ntasks_per_node: str = 'ntasks_per_node'
output: str = 'output'
error: str = 'error'
output_short: str = '-o'
error_short: str = '-e'
array: str = 'array'

shebang: str = 'shebang'
directive: str = 'directive'
safety: str = 'safety'
options: str = 'options'
body: str = 'body'


if __name__ == "__main__":
    pass
