import sys

import pytest

from external_provider.exchange import ExchangeError, ExchangeErrorKind


def test_titles_match_categories():
    assert ExchangeError.program_missing().summary == "External Program Missing"
    assert ExchangeError.lookup_failed("p", "boom").summary == "External Program Lookup Failed"
    assert (
        ExchangeError.execution_failed("p", state="exit status 1").summary
        == "External Program Execution Failed"
    )
    assert (
        ExchangeError.result_malformed("p", "bad").summary
        == "Unexpected External Program Results"
    )


def test_lookup_failure_carries_platform_program_and_error():
    error = ExchangeError.lookup_failed("./tool", "permission denied")

    assert error.kind is ExchangeErrorKind.PROGRAM_LOOKUP_FAILED
    assert error.program == "./tool"
    assert error.detail.endswith(
        f"\nPlatform: {sys.platform}\nProgram: ./tool\nError: permission denied"
    )
    assert "$PATH" in error.detail
    assert "path.module" in error.detail


def test_execution_failure_with_and_without_stderr():
    with_stderr = ExchangeError.execution_failed("p", state="exit status 1", stderr="oops")
    without = ExchangeError.execution_failed("p", state="exit status 1")

    assert "Error Message: oops" in with_stderr.detail
    assert "returned no additional error messaging" in without.detail
    assert with_stderr.context["timed_out"] is False


def test_errors_are_immutable():
    error = ExchangeError.result_malformed("p", "bad")

    with pytest.raises(AttributeError):
        error.summary = "changed"  # type: ignore[misc]
    with pytest.raises(TypeError):
        error.context["program"] = "other"  # type: ignore[index]


def test_as_dict_is_json_friendly():
    error = ExchangeError.execution_failed("p", state="signal: SIGKILL", timed_out=True)

    data = error.as_dict()

    assert data["category"] == "execution_failed"
    assert data["context"] == {"program": "p", "state": "signal: SIGKILL", "timed_out": True}
    assert str(error).startswith("External Program Execution Failed: ")
