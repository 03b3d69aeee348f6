#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""User-defined exceptions of the print queue check."""

__all__ = [
    "MKCommandError",
    "MKException",
    "MKGeneralException",
    "MKInvalidQueueError",
    "MKPreconditionError",
]


# never used directly in the code. Just some wrapper to make all of our
# exceptions handleable with one call
class MKException(Exception):
    pass


class MKGeneralException(MKException):
    pass


class MKPreconditionError(MKException):
    """A required tool or the configuration is not usable. Nothing has been checked yet."""


class MKInvalidQueueError(MKException):
    """The requested queue is not known to the print subsystem."""

    def __init__(self, queue: str) -> None:
        super().__init__(f"Queue {queue} does not exist")
        self.queue = queue


class MKCommandError(MKException):
    """Listing or querying the queues failed on the OS level."""
