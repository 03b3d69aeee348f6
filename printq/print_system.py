#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

# Access to the print subsystem of the monitored host. With the default
# configuration the AIX tools are used:
#
#   lsallq                      one queue name per line
#   lpstat -W -p<queue>         status of a single queue, e.g.
#
#   Queue                      Dev             Status       Job Files              User         PP     %  Blks  Cp Rnk
#   -------------------------- --------------- --------- ------ ------------------ ---------- ---- ---- ----- --- ---
#   lp0                        lp0             READY
#   lp1                        hp@printsrv     DOWN
#   lp2:
#
#   sudo -n enable <queue>      re-enables a queue which is down
#
# The spool directory /var/spool/lpd/qdir holds one file per queued job.

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Sequence
from typing import Protocol

from printq.config import ProbeConfig
from printq.utils.exceptions import MKCommandError, MKPreconditionError


class PrintSystemProto(Protocol):
    def list_queues(self) -> Sequence[str]: ...

    def query_status(self, queue: str) -> Sequence[str]: ...

    def restart_queue(self, queue: str) -> None: ...

    def list_spool_directory(self) -> Sequence[str]: ...


def validate_required_tools(paths: Sequence[str], logger: logging.Logger) -> None:
    for path in paths:
        if not os.path.isfile(path) or not os.access(path, os.X_OK):
            raise MKPreconditionError(f"Required tool {path} not found or not executable")
        logger.debug("Found required tool %s", path)


class SubprocessPrintSystem:
    def __init__(self, config: ProbeConfig, logger: logging.Logger) -> None:
        self._config = config
        self._logger = logger

    def list_queues(self) -> Sequence[str]:
        completed_process = self._run([*self._config.list_queues_command])
        if completed_process.returncode:
            raise MKCommandError(
                "Listing the queues failed: %s" % (completed_process.stderr.strip() or "no output")
            )
        return [line.strip() for line in completed_process.stdout.splitlines() if line.strip()]

    def query_status(self, queue: str) -> Sequence[str]:
        completed_process = self._run([*self._config.status_command, f"-p{queue}"])
        if completed_process.returncode:
            # lpstat reports problems of the queue with a non-zero exit code,
            # the status lines are still meaningful.
            self._logger.debug(
                "Status query for %s exited with %d: %s",
                queue,
                completed_process.returncode,
                completed_process.stderr.strip(),
            )
        return completed_process.stdout.splitlines()

    def restart_queue(self, queue: str) -> None:
        cmd = [*self._config.restart_command, queue]
        self._logger.info("Trying to re-enable queue %s", queue)
        try:
            # No stdin: the elevation must not wait for a password
            completed_process = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf8",
                stdin=subprocess.DEVNULL,
                check=False,
            )
        except OSError as e:
            self._logger.debug("Re-enabling queue %s failed: %s", queue, e)
            return
        self._logger.debug("%r exited with %d", cmd, completed_process.returncode)

    def list_spool_directory(self) -> Sequence[str]:
        return os.listdir(self._config.spool_directory)

    def _run(self, cmd: Sequence[str]) -> subprocess.CompletedProcess[str]:
        self._logger.debug("Executing %r", cmd)
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf8",
                stdin=subprocess.DEVNULL,
                check=False,
            )
        except OSError as e:
            raise MKCommandError(f"Cannot execute {cmd[0]}: {e}") from e
