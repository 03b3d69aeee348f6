#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

# pylint: disable=redefined-outer-name

from pathlib import Path

import pytest
from printq_testlib import FakePrintSystem, status_output, write_script

from printq.active_checks.check_print_queues import main, parse_arguments
from printq.config import CONFIG_ENV_VAR
from printq.utils.exceptions import MKCommandError


def _run(
    capsys: pytest.CaptureFixture[str],
    argv: list[str],
    print_system: FakePrintSystem | None = None,
    environ: dict[str, str] | None = None,
) -> tuple[int, list[str]]:
    exitcode = main(argv, print_system, {} if environ is None else environ)
    return exitcode, capsys.readouterr().out.splitlines()


def test_parse_arguments() -> None:
    args = parse_arguments(["-vv", "lp0"])
    assert args.verbose == 2
    assert args.queue == "lp0"
    assert not args.debug

    args = parse_arguments([])
    assert args.verbose == 0
    assert args.queue is None


@pytest.mark.parametrize("argv", [["-h"], ["--help"], ["-v", "--help", "lp0"]])
def test_help_exits_unknown(capsys: pytest.CaptureFixture[str], argv: list[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        parse_arguments(argv)
    assert exc_info.value.code == 3
    assert "usage: check_print_queues" in capsys.readouterr().out


@pytest.mark.parametrize("argv", [["--no-such-option"], ["lp0", "lp1"]])
def test_usage_error_exits_unknown(capsys: pytest.CaptureFixture[str], argv: list[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        parse_arguments(argv)
    assert exc_info.value.code == 3
    assert "error:" in capsys.readouterr().err


def test_one_queue_down(capsys: pytest.CaptureFixture[str]) -> None:
    print_system = FakePrintSystem(
        ["q1", "q2"],
        {"q1": status_output("q1", "READY"), "q2": status_output("q2", "DOWN")},
        spool=[".", "..", "job1", "job2", "job3"],
    )
    exitcode, output = _run(capsys, [], print_system)

    assert exitcode == 2
    assert len(output) == 1
    assert output[0].startswith("CRITICAL - Ready: 1, Down: 1, Down queues: q2 - ")
    assert output[0].endswith(" | ready=1 down=1 queued=3;50")
    assert print_system.restarted == ["q2"]


def test_backlog(capsys: pytest.CaptureFixture[str]) -> None:
    print_system = FakePrintSystem(
        ["q1"],
        {"q1": status_output("q1", "READY")},
        spool=[f"job{i}" for i in range(60)],
    )
    exitcode, output = _run(capsys, [], print_system)

    assert exitcode == 1
    assert output == [
        "WARNING - Queued jobs: 60 (warn at more than 50), Ready: 1, Down: 0"
        " | ready=1 down=0 queued=60;50"
    ]
    assert not print_system.restarted


def test_all_ready(capsys: pytest.CaptureFixture[str]) -> None:
    print_system = FakePrintSystem(
        ["q1", "q2"],
        {"q1": status_output("q1", "READY"), "q2": status_output("q2", "READY")},
        spool=[".", ".."],
    )
    exitcode, output = _run(capsys, [], print_system)
    assert exitcode == 0
    assert output == ["OK - Ready: 2, Down: 0, Queued jobs: 0 | ready=2 down=0 queued=0;50"]


def test_single_queue(capsys: pytest.CaptureFixture[str]) -> None:
    print_system = FakePrintSystem(
        ["q1", "q2"],
        {"q1": status_output("q1", "DOWN"), "q2": status_output("q2", "READY")},
    )
    exitcode, output = _run(capsys, ["q2"], print_system)
    assert exitcode == 0
    assert output[0].startswith("OK - Ready: 1, Down: 0")
    assert print_system.queried == ["q2"]


def test_unknown_queue(capsys: pytest.CaptureFixture[str]) -> None:
    print_system = FakePrintSystem(["q1"], {"q1": status_output("q1", "READY")})
    exitcode, output = _run(capsys, ["q9"], print_system)
    assert exitcode == 2
    assert output == ["CRITICAL - Queue q9 does not exist"]
    assert not print_system.queried


def test_unreadable_spool_directory(capsys: pytest.CaptureFixture[str]) -> None:
    print_system = FakePrintSystem(
        ["q1"],
        {"q1": status_output("q1", "READY")},
        spool_error=FileNotFoundError(2, "No such file or directory"),
    )
    exitcode = main([], print_system, {})
    captured = capsys.readouterr()

    assert exitcode == 0
    assert captured.out.splitlines() == [
        "OK - Ready: 1, Down: 0, Queued jobs: 0 | ready=1 down=0 queued=0;50"
    ]
    assert "Cannot read the spool directory" in captured.err


def test_verbose_keeps_verdict_last(capsys: pytest.CaptureFixture[str]) -> None:
    print_system = FakePrintSystem(
        ["q1", "q2"],
        {"q1": status_output("q1", "READY"), "q2": status_output("q2", "DOWN")},
    )
    exitcode, output = _run(capsys, ["-v"], print_system)
    assert exitcode == 2
    assert len(output) > 1
    assert "Queue q2 is down" in output
    assert output[-1].startswith("CRITICAL - ")


class _BrokenPrintSystem(FakePrintSystem):
    def list_queues(self):
        raise MKCommandError("Cannot execute /usr/bin/lsallq: gone")


def test_command_error_is_unknown(capsys: pytest.CaptureFixture[str]) -> None:
    exitcode, output = _run(capsys, [], _BrokenPrintSystem([]))
    assert exitcode == 3
    assert output == ["UNKNOWN - Unhandled exception: Cannot execute /usr/bin/lsallq: gone"]


def test_command_error_debug_mode() -> None:
    with pytest.raises(MKCommandError):
        main(["--debug"], _BrokenPrintSystem([]), {})


def test_invalid_config_is_unknown(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    config = tmp_path / "printq.mk"
    config.write_text("{'max_workers': -1}")
    exitcode, output = _run(capsys, [], FakePrintSystem([]), {CONFIG_ENV_VAR: str(config)})
    assert exitcode == 3
    assert output[0].startswith("UNKNOWN - Invalid configuration in ")


@pytest.fixture
def fake_aix(tmp_path: Path) -> Path:
    """Stand-ins for the AIX print tools, configured via a config file"""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    spool = tmp_path / "qdir"
    spool.mkdir()
    for name in ("job1", "job2", "job3"):
        (spool / name).touch()

    lsallq = write_script(
        bin_dir / "lsallq", f"touch {tmp_path / 'listed'}; echo q1; echo q2"
    )
    lpstat = write_script(
        bin_dir / "lpstat",
        'echo "Queue   Dev   Status"\n'
        'echo "------- ----- ------"\n'
        'case "$2" in\n'
        '  -pq1) echo "q1      lp0   READY" ;;\n'
        '  -pq2) echo "q2      lp1   DOWN" ;;\n'
        "esac",
    )
    enable = write_script(bin_dir / "enable", f'echo "$1" >> {tmp_path / "restarted"}')

    config = tmp_path / "printq.mk"
    config.write_text(
        repr(
            {
                "list_queues_command": [str(lsallq)],
                "status_command": [str(lpstat), "-W"],
                "restart_command": [str(enable)],
                "spool_directory": str(spool),
                "max_workers": 2,
            }
        )
    )
    return config


def test_aix_scenario(capsys: pytest.CaptureFixture[str], fake_aix: Path) -> None:
    exitcode, output = _run(capsys, [], None, {CONFIG_ENV_VAR: str(fake_aix)})

    assert exitcode == 2
    assert len(output) == 1
    assert output[0].startswith("CRITICAL - Ready: 1, Down: 1, Down queues: q2 - ")
    assert "queued=3;50" in output[0]
    assert (fake_aix.parent / "restarted").read_text() == "q2\n"


def test_missing_restart_tool(capsys: pytest.CaptureFixture[str], fake_aix: Path) -> None:
    missing = fake_aix.parent / "bin" / "enable"
    missing.unlink()

    exitcode, output = _run(capsys, [], None, {CONFIG_ENV_VAR: str(fake_aix)})

    assert exitcode == 3
    assert output == [f"UNKNOWN - Required tool {missing} not found or not executable"]
    assert not (fake_aix.parent / "listed").exists()
