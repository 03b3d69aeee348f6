#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""check_print_queues - Monitor and re-enable the print queues of a host"""

# Usually executed on the monitored host via SSH or an agent by the
# monitoring core, which also enforces the overall timeout. sudo has to be
# configured to allow the restart command without a password, e.g.
#
#   nagios ALL=(root) NOPASSWD: /usr/bin/enable

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Mapping, Sequence
from typing import NoReturn

from printq.config import load_config, ProbeConfig
from printq.inspection import count_queued_jobs, inspect_queues, resolve_queues, Tally
from printq.print_system import PrintSystemProto, SubprocessPrintSystem, validate_required_tools
from printq.utils.exceptions import MKInvalidQueueError, MKPreconditionError
from printq.utils.log import logger, setup_console_logging
from printq.utils.statename import State
from printq.verdict import make_verdict, reduce_tally, Verdict


def main(
    argv: Sequence[str] | None = None,
    print_system: PrintSystemProto | None = None,
    environ: Mapping[str, str] | None = None,
) -> int:
    args = parse_arguments(sys.argv[1:] if argv is None else argv)
    setup_console_logging(args.verbose)

    verdict = _check_print_queues_main(args, print_system, environ, logger)
    _output_check_result(verdict.render())
    return verdict.returncode


class _ArgumentParser(argparse.ArgumentParser):
    # Usage errors and help have to end as UNKNOWN for the monitoring core
    def exit(self, status: int = 0, message: str | None = None) -> NoReturn:
        if message:
            self._print_message(message, sys.stderr)
        sys.exit(int(State.UNKNOWN))

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(message=f"{self.prog}: error: {message}\n")


def parse_arguments(argv: Sequence[str]) -> argparse.Namespace:
    parser = _ArgumentParser(
        prog="check_print_queues",
        description="""Check the print queues of this host. Queues which are down are
        re-enabled once, the result is reported by the next run.""",
        add_help=False,
    )
    parser.add_argument(
        "-h",
        "--help",
        action="help",
        help="Show this help message and exit with state UNKNOWN",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Verbose mode, diagnostic output on stdout (repeat for more details)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Debug mode: let Python exceptions come through",
    )
    parser.add_argument(
        "queue",
        type=str,
        nargs="?",
        default=None,
        metavar="QUEUE",
        help="Check only this queue (Default: all queues of the system)",
    )
    return parser.parse_args(argv)


def _output_check_result(s: str) -> None:
    sys.stdout.write("%s\n" % s)


def _check_print_queues_main(
    args: argparse.Namespace,
    print_system: PrintSystemProto | None,
    environ: Mapping[str, str] | None,
    logger: logging.Logger,
) -> Verdict:
    try:
        config = load_config(environ)
        if print_system is None:
            validate_required_tools(config.required_tools, logger)
            print_system = SubprocessPrintSystem(config, logger)
        return check_print_queues(print_system, config, args.queue, logger)

    except MKPreconditionError as e:
        return make_verdict(State.UNKNOWN, str(e))

    except MKInvalidQueueError as e:
        return make_verdict(State.CRIT, str(e))

    except Exception as e:
        if args.debug:
            raise
        return make_verdict(State.UNKNOWN, f"Unhandled exception: {e}")


def check_print_queues(
    print_system: PrintSystemProto,
    config: ProbeConfig,
    queue: str | None,
    logger: logging.Logger,
) -> Verdict:
    queues = resolve_queues(print_system, queue, logger)
    tally = inspect_queues(print_system, queues, logger, max_workers=config.max_workers)
    tally += Tally(queued_jobs=count_queued_jobs(print_system, logger))
    logger.debug("Final tally: %r", tally)
    return reduce_tally(tally, queued_jobs_warn=config.queued_jobs_warn)


if __name__ == "__main__":
    sys.exit(main())
