#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

import shlex
import tempfile
import unittest
import subprocess
from pathlib import Path
from unittest import mock

from sbatchjob import slurm_job, sbatch, SubmitResult, Execs, RemoteConf, shell
from sbatchjob.errors import SubmissionFailure


def fake_channel(stdout: bytes = b"", stderr: bytes = b"", status: int = 0):
    out = mock.MagicMock()
    out.read.return_value = stdout
    out.channel.recv_exit_status.return_value = status
    err = mock.MagicMock()
    err.read.return_value = stderr
    return mock.MagicMock(), out, err


class TestRemoteShell(unittest.TestCase):

    def setUp(self):
        self.patcher = mock.patch("sbatchjob.utils.SSHClient")
        self.client_cls = self.patcher.start()
        self.client = self.client_cls.return_value
        self.sftp = self.client.open_sftp.return_value.__enter__.return_value
        self.tmp = tempfile.TemporaryDirectory()
        self.cwd = Path(self.tmp.name)
        self.job = slurm_job("hostname", job_name="hello")

    def tearDown(self):
        self.patcher.stop()
        shell.configure()
        self.tmp.cleanup()

    def test_apply(self):
        shell.configure()
        self.assertTrue(shell.local)
        RemoteConf(host="login.cluster", username="me").apply()
        self.assertFalse(shell.local)

    def test_put(self):
        RemoteConf(host="login.cluster", username="me", port=2222).apply()
        self.client.exec_command.return_value = fake_channel()
        local = self.cwd / "job.sh"
        local.write_text("#!/bin/bash\n")

        shell.put(local, "/scratch/me/jobs/job.sh")

        self.client.connect.assert_called_once_with(hostname="login.cluster", port=2222, username="me")
        self.client.exec_command.assert_called_once_with(shlex.join(["mkdir", "-p", "/scratch/me/jobs"]))
        self.sftp.put.assert_called_once_with(local.as_posix(), "/scratch/me/jobs/job.sh")
        self.client.close.assert_called_once()

    def test_put_local_is_noop(self):
        shell.configure()
        shell.put(self.cwd / "job.sh", "/scratch/me/jobs/job.sh")
        self.client.exec_command.assert_not_called()
        self.client.open_sftp.assert_not_called()

    def test_submit(self):
        RemoteConf(host="login.cluster", username="me").apply()
        self.client.exec_command.return_value = fake_channel(b"Submitted batch job 42\n")
        target = self.cwd / "job.sh"

        result = sbatch(self.job, target, execs=Execs(sbatch="/opt/slurm/bin/sbatch"))

        self.assertIsInstance(result, SubmitResult)
        self.assertEqual(result.stdout, "Submitted batch job 42")
        self.assertEqual(self.client.exec_command.call_args_list, [
            mock.call(shlex.join(["mkdir", "-p", self.cwd.as_posix()])),
            mock.call(shlex.join(["/opt/slurm/bin/sbatch", target.as_posix()])),
        ])
        self.sftp.put.assert_called_once_with(target.as_posix(), target.as_posix())

    def test_submit_non_zero_exitcode(self):
        RemoteConf(host="login.cluster", username="me").apply()
        self.client.exec_command.return_value = fake_channel(stderr=b"sbatch: error: invalid partition", status=1)

        with self.assertRaises(SubmissionFailure) as cm:
            sbatch(self.job, self.cwd / "job.sh", execs=Execs(sbatch="sbatch"))
        self.assertIsInstance(cm.exception.__cause__, subprocess.CalledProcessError)
        self.assertEqual(cm.exception.__cause__.returncode, 1)
        self.assertEqual(cm.exception.__cause__.stderr, "sbatch: error: invalid partition")


if __name__ == "__main__":
    unittest.main()
