#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2023-2024 Perevoshchikov Egor
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

# Last modified: 18-10-2026 11:02:17

from enum import StrEnum
import os
import sys
import json
import toml
import shlex
import shutil
import logging
import subprocess
from pathlib import Path, PurePosixPath
import paramiko
from paramiko import SSHClient
from typing import Literal, Any, Type

from marshmallow import fields


class UpperLevelFilter(logging.Filter):
    max_level: int

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record) -> bool:
        return record.levelno <= self.max_level


log2type = Literal["file", "screen", "both", "off"]
formatter: logging.Formatter = logging.Formatter('%(asctime)s:%(levelname)s:%(name)s: %(message)s')


logger = logging.getLogger("sbatchjob")
logger.handlers.clear()
logger.setLevel(logging.INFO)
soutHandler = logging.StreamHandler(stream=sys.stdout)
soutHandler.setLevel(logging.DEBUG)
soutHandler.setFormatter(formatter)
soutHandler.addFilter(UpperLevelFilter(logging.WARNING - 1))
logger.addHandler(soutHandler)
serrHandler = logging.StreamHandler(stream=sys.stderr)
serrHandler.setFormatter(formatter)
serrHandler.setLevel(logging.WARNING)
logger.addHandler(serrHandler)


def configure_logger(logto: log2type, logfile: Path | None = None, debug: bool = True):
    logger.handlers.clear()
    loglevel: int = logging.DEBUG if debug else logging.INFO
    logger.setLevel(loglevel)
    logger.propagate = True

    if logto == 'file' or logto == 'both':
        if logfile is None:
            raise ValueError("Logfile is not specified")
        logfile.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(logfile)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)
    if logto == 'screen' or logto == 'both':
        # rendered scripts go to stdout, so keep logging off it
        serr_handler = logging.StreamHandler(stream=sys.stderr)
        serr_handler.setFormatter(formatter)
        serr_handler.setLevel(logging.DEBUG)
        logger.addHandler(serr_handler)

    if logto == 'off':
        logger.addHandler(logging.NullHandler())
        logger.propagate = False
    logger.debug(f"Logging configured: {logto}")


class FieldPath(fields.Field):
    def _deserialize(self, value: str, attr, data, **kwargs) -> Path:
        return Path(value).expanduser()

    def _serialize(self, value: Path | None, attr, obj, **kwargs) -> str | None:
        return value.as_posix() if value is not None else None


class Shell:
    class AuthMeth(StrEnum):
        NOPASS = "NOPASS"
        PASS = "PASS"
        KEYFILE = "KEYFILE"
        AGENT = "AGENT"

    __local: bool = True
    __host: str
    __port: int = 22
    __authmeth: AuthMeth = AuthMeth.NOPASS
    __username: str
    __password: str
    __keyfile: Path

    __connected: bool = False
    __context_present: bool = False
    __ssh: SSHClient

    def __init__(self, *args, **kwargs) -> None:
        self.configure(*args, **kwargs)

    def configure(
            self,
            local: bool = True,
            host: str | None = None,
            port: int = 22,
            authmeth: AuthMeth = AuthMeth.NOPASS,
            username: str | None = None,
            password: str | None = None,
            keyfile: Path | None = None,
        ) -> None:
        if self.__connected: self.__disconnect()
        self.__local = local
        if not self.__local:
            if host is None: raise ValueError("No host specified")
            self.__host = host
            self.__port = port
            self.__authmeth = Shell.AuthMeth(authmeth)
            if username is None: raise ValueError("No username specified")
            self.__username = username
            match self.__authmeth:
                case Shell.AuthMeth.PASS:
                    if password is None: raise ValueError("No password specified")
                    self.__password = password
                case Shell.AuthMeth.KEYFILE:
                    if keyfile is None: raise ValueError("No keyfile specified")
                    self.__keyfile = keyfile

        self.__connected = False
        self.__context_present = False
        self.__ssh = SSHClient()
        self.__ssh.load_system_host_keys()
        self.__ssh.set_missing_host_key_policy(paramiko.RejectPolicy())

    @property
    def local(self) -> bool: return self.__local

    def __connect_via_agent(self) -> None:
        agent_keys = paramiko.Agent().get_keys()
        if len(agent_keys) == 0: raise ConnectionError(f"Cannot connect to {self.__host}: No keys available from ssh-agent")

        for key in agent_keys:
            try:
                logger.debug(f"Trying key: {key.get_fingerprint().hex()}")
                self.__ssh.connect(hostname=self.__host, port=self.__port, username=self.__username, pkey=key)
                logger.info("Connection successful!")
                break
            except paramiko.AuthenticationException: logger.debug("Authentication failed with this key.")
            except paramiko.SSHException as e:       logger.error(f"SSH error: {e}")
        else: raise ConnectionError("Failed to authenticate with any available keys.")

    def __connect(self) -> None:
        if self.__local or self.__connected: return
        logger.debug(f"Connecting to {self.__username}@{self.__host}:{self.__port}")
        match self.__authmeth:
            case Shell.AuthMeth.PASS: self.__ssh.connect(hostname=self.__host, port=self.__port, username=self.__username, password=self.__password)
            case Shell.AuthMeth.NOPASS: self.__ssh.connect(hostname=self.__host, port=self.__port, username=self.__username)
            case Shell.AuthMeth.KEYFILE: self.__ssh.connect(hostname=self.__host, port=self.__port, username=self.__username, key_filename=self.__keyfile.expanduser().resolve().as_posix())
            case Shell.AuthMeth.AGENT:
                self.__connect_via_agent()
        self.__connected = True

    def __disconnect(self) -> None:
        if self.__local or (not self.__connected): return
        self.__ssh.close()
        self.__connected = False

    def __enter__(self) -> 'Shell':
        self.__connect()
        self.__context_present = True
        return self

    def __exit__(self, exc_type: Type[Exception], exc_value: Exception, exc_traceback) -> None:
        self.__context_present = False
        self.__disconnect()

    def local_exec(self, cmds: list[str]) -> tuple[str, str]:
        logger.debug(f"Calling '{cmds}'")
        try:
            proc = subprocess.run(cmds, capture_output=True, check=True, env=os.environ.copy())
        except subprocess.CalledProcessError as e:
            logger.error("Process returned non-zero exitcode")
            logger.error("Output from stdout:")
            logger.error(e.stdout)
            logger.error("Output from stderr:")
            logger.error(e.stderr)
            raise
        return proc.stdout.decode().strip(), proc.stderr.decode().strip()

    def remote_exec(self, cmds: list[str]) -> tuple[str, str]:
        if not self.__connected: self.__connect()
        logger.debug(f"Calling '{cmds}' on {self.__host}")
        try:
            _, stdout, stderr = self.__ssh.exec_command(shlex.join(cmds))
            bout, berr = stdout.read().decode().strip(), stderr.read().decode().strip()
            retcode = stdout.channel.recv_exit_status()
        finally:
            if not self.__context_present: self.__disconnect()
        if retcode != 0:
            logger.error(f"Remote process returned non-zero exitcode: {retcode}")
            logger.error("Output from stdout:")
            logger.error(bout)
            logger.error("Output from stderr:")
            logger.error(berr)
            raise subprocess.CalledProcessError(retcode, cmds, bout, berr)
        return bout, berr

    def exec(self, cmds: list[str]) -> tuple[str, str]: return self.local_exec(cmds) if self.__local else self.remote_exec(cmds)

    def put(self, local_path: Path, remote_path: str) -> None:
        if self.__local: return
        if not self.__connected: self.__connect()
        logger.debug(f"Uploading {local_path.as_posix()} to {self.__host}:{remote_path}")
        try:
            _, stdout, _ = self.__ssh.exec_command(shlex.join(["mkdir", "-p", PurePosixPath(remote_path).parent.as_posix()]))
            stdout.channel.recv_exit_status()
            with self.__ssh.open_sftp() as sftp:
                sftp.put(local_path.as_posix(), remote_path)
        finally:
            if not self.__context_present: self.__disconnect()


shell = Shell()


def load_conf(file: Path) -> Any:
    text = file.read_text()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    try:
        return toml.loads(text)
    except toml.TomlDecodeError:
        pass

    return None


def is_exe(fpath: str | Path) -> bool:
    if shutil.which(fpath if isinstance(fpath, str) else fpath.as_posix()):
        return True

    if (os.path.isfile(fpath) and os.access(fpath, os.X_OK)):
        return True

    return False


if __name__ == "__main__":
    pass
