#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Configuration of the print queue check

The defaults target the AIX print subsystem. All of them can be overridden
by a file holding a Python dict, e.g.

    {
        "spool_directory": "/var/spool/lpd/qdir",
        "queued_jobs_warn": 100,
        "max_workers": 4,
    }

The path of that file is taken from the environment variable PRINTQ_CONFIG.
"""

import os
from collections.abc import Mapping, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from printq.utils.exceptions import MKGeneralException, MKPreconditionError
from printq.utils.log import logger
from printq.utils.store import load_object_from_file

CONFIG_ENV_VAR = "PRINTQ_CONFIG"


class ProbeConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    list_queues_command: Sequence[str] = Field(default=("/usr/bin/lsallq",), min_length=1)
    status_command: Sequence[str] = Field(default=("/usr/bin/lpstat", "-W"), min_length=1)
    restart_command: Sequence[str] = Field(
        default=("/usr/bin/sudo", "-n", "/usr/bin/enable"), min_length=1
    )
    spool_directory: Path = Path("/var/spool/lpd/qdir")
    queued_jobs_warn: int = Field(default=50, ge=0)
    max_workers: int = Field(default=1, ge=1)

    @property
    def required_tools(self) -> Sequence[str]:
        """Executables which have to be present before anything is checked

        >>> ProbeConfig().required_tools
        ['/usr/bin/lsallq', '/usr/bin/lpstat', '/usr/bin/sudo', '/usr/bin/enable']
        >>> ProbeConfig(restart_command=["/usr/bin/enable"]).required_tools
        ['/usr/bin/lsallq', '/usr/bin/lpstat', '/usr/bin/enable']
        """
        candidates = [
            self.list_queues_command[0],
            self.status_command[0],
            self.restart_command[0],
            # The elevated command itself, e.g. "enable" behind "sudo -n"
            self.restart_command[-1],
        ]
        return list(dict.fromkeys(candidates))


def load_config(environ: Mapping[str, str] | None = None) -> ProbeConfig:
    env = os.environ if environ is None else environ
    if not (path := env.get(CONFIG_ENV_VAR)):
        return ProbeConfig()

    logger.debug("Reading configuration from %s", path)
    try:
        overrides = load_object_from_file(path, default={})
    except MKGeneralException as e:
        raise MKPreconditionError(str(e)) from e

    if not isinstance(overrides, dict):
        raise MKPreconditionError(f'Configuration file "{path}" does not hold a dictionary')

    try:
        return ProbeConfig.model_validate(overrides)
    except ValidationError as e:
        raise MKPreconditionError(
            f'Invalid configuration in "{path}": {e.error_count()} validation error(s)'
        ) from e
