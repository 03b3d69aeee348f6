#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Collecting the state of the print queues

Every stage gets the print system and a logger passed in and returns its
result, nothing is kept in module state. Per queue results are combined by
adding up Tally objects, which keeps the outcome independent of the order
in which the queues have been processed.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from printq.print_system import PrintSystemProto
from printq.utils.exceptions import MKInvalidQueueError
from printq.utils.log import VERBOSE


class QueueState(enum.Enum):
    READY = "ready"
    DOWN = "down"
    OTHER = "other"


@dataclass(frozen=True)
class QueueObservation:
    name: str
    state: QueueState


@dataclass(frozen=True)
class Tally:
    ready_count: int = 0
    down_count: int = 0
    down_queues: tuple[str, ...] = ()
    queued_jobs: int = 0

    def __add__(self, other: Tally) -> Tally:
        return Tally(
            ready_count=self.ready_count + other.ready_count,
            down_count=self.down_count + other.down_count,
            down_queues=self.down_queues + other.down_queues,
            queued_jobs=self.queued_jobs + other.queued_jobs,
        )

    @classmethod
    def from_observations(cls, observations: Iterable[QueueObservation]) -> Tally:
        tally = cls()
        for observation in observations:
            match observation.state:
                case QueueState.READY:
                    tally += cls(ready_count=1)
                case QueueState.DOWN:
                    tally += cls(down_count=1, down_queues=(observation.name,))
        return tally


def resolve_queues(
    print_system: PrintSystemProto,
    requested: str | None,
    logger: logging.Logger,
) -> Sequence[str]:
    queues = print_system.list_queues()
    logger.log(VERBOSE, "Known queues: %s", ", ".join(queues) or "none")
    if requested is None:
        return queues
    if requested not in queues:
        raise MKInvalidQueueError(requested)
    return [requested]


def classify_line(line: str) -> QueueState | None:
    """Classify one line of the status output. None means the line carries no state.

    >>> classify_line("Queue   Dev   Status") is None
    True
    >>> classify_line("----- ----- ---------") is None
    True
    >>> classify_line("lp2:") is None
    True
    >>> classify_line("lp0   lp0   READY")
    <QueueState.READY: 'ready'>
    >>> classify_line("lp1   hp@srv   DOWN")
    <QueueState.DOWN: 'down'>
    >>> classify_line("lp3   lp3   RUNNING   12  report.ps")
    <QueueState.OTHER: 'other'>
    """
    if line.startswith("Queue") or line.startswith("-") or line.endswith(":"):
        return None
    if "READY" in line:
        return QueueState.READY
    if "DOWN" in line:
        return QueueState.DOWN
    return QueueState.OTHER


def parse_status(queue: str, lines: Iterable[str]) -> Sequence[QueueObservation]:
    return [
        QueueObservation(queue, state)
        for line in lines
        if (state := classify_line(line)) is not None
    ]


def inspect_queue(
    print_system: PrintSystemProto,
    queue: str,
    logger: logging.Logger,
) -> Tally:
    observations = []
    for observation in parse_status(queue, print_system.query_status(queue)):
        logger.log(VERBOSE, "Queue %s is %s", queue, observation.state.value)
        if observation.state is QueueState.DOWN:
            # Fire and forget, the next check run tells whether it helped
            print_system.restart_queue(queue)
        observations.append(observation)
    return Tally.from_observations(observations)


def inspect_queues(
    print_system: PrintSystemProto,
    queues: Sequence[str],
    logger: logging.Logger,
    max_workers: int = 1,
) -> Tally:
    if max_workers > 1 and len(queues) > 1:
        logger.debug("Querying %d queues with %d workers", len(queues), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as pool_executor:
            tallies = list(
                pool_executor.map(lambda q: inspect_queue(print_system, q, logger), queues)
            )
    else:
        tallies = [inspect_queue(print_system, queue, logger) for queue in queues]
    # Summed up in listing order, so the down queues keep their discovery order
    return sum(tallies, Tally())


def count_queued_jobs(print_system: PrintSystemProto, logger: logging.Logger) -> int:
    try:
        entries = print_system.list_spool_directory()
    except OSError as e:
        logger.warning("Cannot read the spool directory, assuming no queued jobs: %s", e)
        return 0
    queued_jobs = len([entry for entry in entries if entry not in (".", "..")])
    logger.log(VERBOSE, "Queued jobs: %d", queued_jobs)
    return queued_jobs
