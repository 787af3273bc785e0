#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

import os
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import toml

from sbatchjob import Defaults, Execs, RemoteConf
from sbatchjob.config import conf_env_var
from sbatchjob.errors import ConfigurationError
from sbatchjob.utils import Shell, load_conf


class TestDefaults(unittest.TestCase):

    def test_empty(self):
        self.assertEqual(Defaults.from_schema({}), Defaults())

    def test_values(self):
        defaults = Defaults.from_schema({
            "shebang": "#!/bin/sh",
            "output": "slurm/%j.out",
            "execs": {"sbatch": "/opt/slurm/bin/sbatch"},
            "remote": {"host": "login.cluster", "username": "me", "authmeth": "KEYFILE", "keyfile": "/tmp/id_ed25519"},
        })
        self.assertEqual(defaults.shebang, "#!/bin/sh")
        self.assertEqual(defaults.output, "slurm/%j.out")
        self.assertEqual(defaults.error, "logs/%x_%j.err")
        self.assertEqual(defaults.execs, Execs(sbatch="/opt/slurm/bin/sbatch"))
        self.assertEqual(defaults.remote, RemoteConf(
            host="login.cluster",
            username="me",
            authmeth=Shell.AuthMeth.KEYFILE,
            keyfile=Path("/tmp/id_ed25519"),
        ))

    def test_invalid(self):
        with self.assertRaises(ConfigurationError):
            Defaults.from_schema({"remote": {"host": "login.cluster", "username": "me", "port": 0}})
        with self.assertRaises(ConfigurationError):
            Defaults.from_schema({"remote": {"host": "login.cluster"}})
        with self.assertRaises(ConfigurationError):
            Defaults.from_schema({"unknown": 1})

    def test_dump(self):
        defaults = Defaults(safety="set -eu", execs=Execs(sbatch="sb"))
        data = toml.loads(toml.dumps(defaults.dump_schema()))
        self.assertEqual(Defaults.from_schema(data), defaults)


class TestLoad(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.cwd = Path(self.tmp.name)
        self.base = self.cwd / "base.toml"

    def tearDown(self):
        self.tmp.cleanup()

    def test_merge(self):
        self.base.write_text(toml.dumps({"shebang": "#!/bin/sh", "safety": "set -e"}))
        (self.cwd / "sbatchjob.json").write_text(json.dumps({"safety": "set -eu"}))
        with mock.patch.dict(os.environ, {conf_env_var: self.base.as_posix()}):
            defaults = Defaults.load(self.cwd)
        self.assertEqual(defaults.shebang, "#!/bin/sh")
        self.assertEqual(defaults.safety, "set -eu")

    def test_no_current_conf(self):
        self.base.write_text("")
        with mock.patch.dict(os.environ, {conf_env_var: self.base.as_posix()}):
            self.assertEqual(Defaults.load(self.cwd), Defaults())

    def test_missing_base_conf(self):
        with mock.patch.dict(os.environ, {conf_env_var: (self.cwd / "nope.toml").as_posix()}):
            with self.assertRaises(ConfigurationError):
                Defaults.load(self.cwd)

    def test_unparsable(self):
        self.base.write_text("")
        (self.cwd / "sbatchjob.toml").write_text("this is = = not toml")
        with mock.patch.dict(os.environ, {conf_env_var: self.base.as_posix()}):
            with self.assertRaises(ConfigurationError):
                Defaults.load(self.cwd)

    def test_not_a_table(self):
        self.base.write_text("[1, 2]")
        with mock.patch.dict(os.environ, {conf_env_var: self.base.as_posix()}):
            with self.assertRaises(ConfigurationError):
                Defaults.load(self.cwd)

    def test_load_conf(self):
        jfile = self.cwd / "a.json"
        jfile.write_text('{"a": 1}')
        tfile = self.cwd / "a.toml"
        tfile.write_text('a = 1\n[b]\nc = "d"\n')
        self.assertEqual(load_conf(jfile), {"a": 1})
        self.assertEqual(load_conf(tfile), {"a": 1, "b": {"c": "d"}})


if __name__ == "__main__":
    unittest.main()
