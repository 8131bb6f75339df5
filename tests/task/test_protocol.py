"""Tests for the host contract types."""

import pytest

from binrunner.task.protocol import (
    PING_PROCEDURE,
    ActionResult,
    ClientResponse,
    ClientStatus,
    ScheduledAction,
    TaskHelper,
    TimeUnit,
)


def noop_callback(result):
    return None


class TestTimeUnit:
    @pytest.mark.parametrize(
        "unit,amount,expected",
        [
            (TimeUnit.MILLISECONDS, 1500, 1500),
            (TimeUnit.SECONDS, 2, 2000),
            (TimeUnit.MINUTES, 1, 60000),
            (TimeUnit.HOURS, 1, 3_600_000),
        ],
    )
    def test_to_millis(self, unit, amount, expected):
        assert unit.to_millis(amount) == expected


class TestScheduledAction:
    def test_procedure_call_collects_params(self):
        action = ScheduledAction.procedure_call(
            10, TimeUnit.SECONDS, noop_callback, "@Statistics", "PROCEDURE", 0,
        )

        assert action.delay == 10
        assert action.delay_ms == 10000
        assert action.procedure == "@Statistics"
        assert action.params == ("PROCEDURE", 0)
        assert action.callback is noop_callback

    def test_no_params(self):
        action = ScheduledAction.procedure_call(5, TimeUnit.MILLISECONDS, noop_callback, PING_PROCEDURE)
        assert action.params == ()

    def test_is_immutable(self):
        action = ScheduledAction.procedure_call(5, TimeUnit.MILLISECONDS, noop_callback, PING_PROCEDURE)
        with pytest.raises(AttributeError):
            action.delay = 6


class TestActionResult:
    def test_success(self):
        result = ActionResult(ClientResponse(ClientStatus.SUCCESS))

        assert result.succeeded
        assert result.status == 1
        assert result.status_string == ""

    def test_failure_exposes_status_string(self):
        result = ActionResult(ClientResponse(ClientStatus.GRACEFUL_FAILURE, "Transaction aborted"))

        assert not result.succeeded
        assert result.status == ClientStatus.GRACEFUL_FAILURE
        assert result.status_string == "Transaction aborted"

    def test_plain_int_status(self):
        """Hosts may hand back raw integers."""
        assert ActionResult(ClientResponse(1)).succeeded
        assert not ActionResult(ClientResponse(-4)).succeeded


class TestTaskHelperProtocol:
    def test_recording_helper_matches(self, helper):
        assert isinstance(helper, TaskHelper)

    def test_partial_helper_does_not_match(self):
        class InfoOnly:
            def log_info(self, message):
                pass

        assert not isinstance(InfoOnly(), TaskHelper)
