import json
import os
import sys
import threading
import time
from pathlib import Path

import pytest

from external_provider.exchange import (
    Deadline,
    ExchangeError,
    ExchangeErrorKind,
    ProcessLauncher,
    ResolvedProgram,
)
from external_provider.exchange import launcher as launcher_module
from external_provider.exchange.launcher import describe_exit

STUB = Path(__file__).parent / "programs" / "external_stub.py"


def _stub(*arguments: str) -> ResolvedProgram:
    return ResolvedProgram(
        requested=sys.executable,
        path=sys.executable,
        arguments=(str(STUB), *arguments),
    )


def _payload(query: dict) -> bytes:
    return json.dumps(query).encode("utf-8")


class RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def debug(self, event: str, **kw) -> None:
        self.events.append((event, kw))

    def warning(self, event: str, **kw) -> None:
        self.events.append((event, kw))


def test_launch_returns_stdout():
    output = ProcessLauncher().launch(_stub("cheese"), _payload({"value": "pizza"}))

    assert json.loads(output) == {"query_value": "pizza", "argument": "cheese"}


def test_launch_sets_working_directory(tmp_path: Path):
    output = ProcessLauncher().launch(
        _stub(), _payload({"report_cwd": "1"}), working_dir=str(tmp_path)
    )

    assert os.path.realpath(json.loads(output)["cwd"]) == os.path.realpath(tmp_path)


def test_launch_inherits_current_directory_by_default(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    output = ProcessLauncher().launch(_stub(), _payload({"report_cwd": "1"}))

    assert os.path.realpath(json.loads(output)["cwd"]) == os.path.realpath(tmp_path)


def test_non_zero_exit_includes_stderr():
    outcome = ProcessLauncher().launch(_stub(), _payload({"fail": "true"}))

    assert isinstance(outcome, ExchangeError)
    assert outcome.kind is ExchangeErrorKind.EXECUTION_FAILED
    assert "I was asked to fail" in outcome.detail
    assert outcome.context["stderr"] == "I was asked to fail\n"
    assert outcome.context["state"] == "exit status 1"
    assert outcome.context["timed_out"] is False


def test_non_zero_exit_without_stderr_names_exit_state():
    outcome = ProcessLauncher().launch(_stub(), _payload({"exit_code": "3"}))

    assert isinstance(outcome, ExchangeError)
    assert outcome.kind is ExchangeErrorKind.EXECUTION_FAILED
    assert "returned no additional error messaging" in outcome.detail
    assert "State: exit status 3" in outcome.detail
    assert "stderr" not in outcome.context


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
def test_signal_termination_is_execution_failure():
    outcome = ProcessLauncher().launch(_stub(), _payload({"signal": "1"}))

    assert isinstance(outcome, ExchangeError)
    assert outcome.context["state"] == "signal: SIGTERM"


def test_missing_working_directory_fails_to_start(tmp_path: Path):
    outcome = ProcessLauncher().launch(
        _stub(), _payload({}), working_dir=str(tmp_path / "missing")
    )

    assert isinstance(outcome, ExchangeError)
    assert outcome.kind is ExchangeErrorKind.EXECUTION_FAILED
    assert outcome.context["state"] == "not started"
    assert "error" in outcome.context


def test_deadline_kills_slow_program():
    started = time.monotonic()

    outcome = ProcessLauncher().launch(
        _stub(), _payload({"sleep": "30"}), deadline=Deadline.after(0.5)
    )

    assert time.monotonic() - started < 10
    assert isinstance(outcome, ExchangeError)
    assert outcome.kind is ExchangeErrorKind.EXECUTION_FAILED
    assert outcome.context["timed_out"] is True
    assert "did not exit within 0.5 seconds" in outcome.detail


def test_deadline_still_traces_executed_program(monkeypatch):
    recorder = RecordingLogger()
    monkeypatch.setattr(launcher_module, "logger", recorder)

    outcome = ProcessLauncher().launch(
        _stub(), _payload({"sleep": "30"}), deadline=Deadline.after(0.3)
    )

    assert isinstance(outcome, ExchangeError)
    assert [event for event, _ in recorder.events] == [
        "exchange.program.executing",
        "exchange.program.executed",
        "exchange.program.terminated",
    ]
    assert recorder.events[1][1]["output"] == ""


def test_deadline_error_reports_clamped_timeout(monkeypatch):
    def _fail(*args, **kwargs):  # pragma: no cover - must not be reached
        raise AssertionError("process launched after deadline")

    monkeypatch.setattr("subprocess.Popen", _fail)

    outcome = ProcessLauncher().launch(_stub(), _payload({}), deadline=Deadline.after(-1))

    assert isinstance(outcome, ExchangeError)
    assert "did not exit within 0 seconds" in outcome.detail


def test_cancellation_kills_program_promptly():
    deadline = Deadline()
    timer = threading.Timer(0.3, deadline.cancel)
    timer.start()
    started = time.monotonic()
    try:
        outcome = ProcessLauncher().launch(
            _stub(), _payload({"sleep": "30"}), deadline=deadline
        )
    finally:
        timer.cancel()

    assert time.monotonic() - started < 10
    assert isinstance(outcome, ExchangeError)
    assert outcome.context["timed_out"] is True
    assert "cancelled" in outcome.context["state"]


def test_already_expired_deadline_does_not_launch(monkeypatch):
    def _fail(*args, **kwargs):  # pragma: no cover - must not be reached
        raise AssertionError("process launched after deadline")

    monkeypatch.setattr("subprocess.Popen", _fail)
    deadline = Deadline.after(0)

    outcome = ProcessLauncher().launch(_stub(), _payload({}), deadline=deadline)

    assert isinstance(outcome, ExchangeError)
    assert outcome.context["timed_out"] is True


def test_large_query_and_output_do_not_deadlock():
    big = "x" * 2_000_000

    output = ProcessLauncher().launch(
        _stub(), _payload({"echo": big}), deadline=Deadline.after(60)
    )

    assert json.loads(output)["echo"] == big


def test_program_writing_before_reading_does_not_deadlock():
    output = ProcessLauncher().launch(
        _stub("--flood"), _payload({"echo": "z" * 2_000_000}), deadline=Deadline.after(60)
    )

    assert len(json.loads(output)["flood"]) == 1_000_000


def test_describe_exit():
    assert describe_exit(0) == "exit status 0"
    assert describe_exit(2) == "exit status 2"
    assert describe_exit(-15) == "signal: SIGTERM"
