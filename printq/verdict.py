#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from printq.inspection import Tally
from printq.utils.statename import service_state_name, State

Perfdata = Sequence[tuple[str, int] | tuple[str, int, int]]


@dataclass(frozen=True)
class Verdict:
    state: State
    summary: str
    perfdata: Perfdata = field(default=())
    # The exit code normally equals the state. See reduce_tally for the exception.
    exit_code: int | None = None

    @property
    def returncode(self) -> int:
        return int(self.state) if self.exit_code is None else self.exit_code

    def render(self) -> str:
        """
        >>> Verdict(State.OK, "OK - fine", [("ready", 2), ("queued", 3, 50)]).render()
        'OK - fine | ready=2 queued=3;50'
        >>> Verdict(State.CRIT, "CRITICAL - Queue lp9 does not exist").render()
        'CRITICAL - Queue lp9 does not exist'
        """
        if not self.perfdata:
            return self.summary
        return "{} | {}".format(
            self.summary,
            " ".join("{}={}".format(p[0], ";".join(map(str, p[1:]))) for p in self.perfdata),
        )


def make_verdict(state: State, text: str) -> Verdict:
    return Verdict(state, f"{service_state_name(state)} - {text}")


def reduce_tally(tally: Tally, *, queued_jobs_warn: int = 50) -> Verdict:
    """Map the final tally to exactly one verdict, first match wins"""
    perfdata = [
        ("ready", tally.ready_count),
        ("down", tally.down_count),
        ("queued", tally.queued_jobs, queued_jobs_warn),
    ]

    if tally.down_count > 0:
        return Verdict(
            State.CRIT,
            "CRITICAL - Ready: %d, Down: %d, Down queues: %s - re-enabling has been triggered, "
            "check the printer and its connection if the queues stay down"
            % (tally.ready_count, tally.down_count, " ".join(tally.down_queues)),
            perfdata,
        )

    if tally.queued_jobs > queued_jobs_warn:
        return Verdict(
            State.WARN,
            "WARNING - Queued jobs: %d (warn at more than %d), Ready: %d, Down: %d"
            % (tally.queued_jobs, queued_jobs_warn, tally.ready_count, tally.down_count),
            perfdata,
        )

    if tally.down_count == 0:
        return Verdict(
            State.OK,
            "OK - Ready: %d, Down: %d, Queued jobs: %d"
            % (tally.ready_count, tally.down_count, tally.queued_jobs),
            perfdata,
        )

    # Not reachable with a tally from the pipeline. The monitoring side
    # relies on this being reported with exit code 0.
    return Verdict(
        State.UNKNOWN,
        "UNKNOWN - Cannot determine the state of the print queues",
        perfdata,
        exit_code=int(State.OK),
    )
