import pytest
from botocore.exceptions import ClientError

from configdrill.polling import PollFailedError, PollTimeoutError, wait_for_state, wait_until_gone
from scenarios.encrypted_volumes import wait_for_volume_available


class _Sleeper:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class _VolumeEC2:
    def __init__(self, states):
        self.states = list(states)
        self.describe_calls = 0

    def describe_volumes(self, **kwargs):
        self.describe_calls += 1
        state = self.states.pop(0)
        if isinstance(state, Exception):
            raise state
        return {"Volumes": [{"VolumeId": kwargs["VolumeIds"][0], "State": state}]}


def test_volume_becomes_available_on_third_call():
    ec2 = _VolumeEC2(["creating", "creating", "available"])
    sleeper = _Sleeper()
    volume = wait_for_volume_available(ec2, "vol-1", interval=5, max_attempts=60, sleep=sleeper)
    assert volume["State"] == "available"
    assert ec2.describe_calls == 3
    assert sleeper.calls == [5, 5]


def test_volume_error_state_is_terminal():
    ec2 = _VolumeEC2(["creating", "error", "available"])
    with pytest.raises(PollFailedError) as excinfo:
        wait_for_volume_available(ec2, "vol-1", interval=0, max_attempts=10, sleep=_Sleeper())
    assert excinfo.value.status == "error"
    assert excinfo.value.attempts == 2
    assert ec2.describe_calls == 2


def test_timeout_after_max_attempts_without_trailing_sleep():
    ec2 = _VolumeEC2(["creating"] * 3)
    sleeper = _Sleeper()
    with pytest.raises(PollTimeoutError) as excinfo:
        wait_for_volume_available(ec2, "vol-1", interval=1, max_attempts=3, sleep=sleeper)
    assert excinfo.value.last_status == "creating"
    assert ec2.describe_calls == 3
    assert len(sleeper.calls) == 2


def test_retry_codes_are_treated_as_not_ready():
    not_found = ClientError({"Error": {"Code": "InvalidVolume.NotFound"}}, "DescribeVolumes")
    ec2 = _VolumeEC2([not_found, "available"])
    volume = wait_for_volume_available(ec2, "vol-1", interval=0, max_attempts=5, sleep=_Sleeper())
    assert volume["State"] == "available"


def test_other_client_errors_propagate_unless_tolerated():
    denied = ClientError({"Error": {"Code": "AccessDenied"}}, "Describe")
    calls = {"count": 0}

    def describe():
        calls["count"] += 1
        if calls["count"] == 1:
            raise denied
        return "ready"

    with pytest.raises(ClientError):
        wait_for_state(describe, target="ready", max_attempts=3, interval=0, sleep=_Sleeper())

    calls["count"] = 0
    tolerated = wait_for_state(
        describe, target="ready", max_attempts=3, interval=0, sleep=_Sleeper(), tolerate_errors=True
    )
    assert tolerated == "ready"


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        wait_for_state(lambda: "x", target="x", max_attempts=0)


def test_wait_until_gone_on_not_found_code():
    calls = {"count": 0}

    def describe():
        calls["count"] += 1
        if calls["count"] >= 2:
            raise ClientError({"Error": {"Code": "FileSystemNotFound"}}, "DescribeFileSystems")
        return {"state": "deleting"}

    wait_until_gone(describe, gone_codes={"FileSystemNotFound"}, interval=0, max_attempts=5, sleep=_Sleeper())
    assert calls["count"] == 2


def test_wait_until_gone_on_gone_state():
    responses = iter([{"n": 1}, {"n": 0}])
    wait_until_gone(
        lambda: next(responses),
        gone_codes=(),
        status_of=lambda r: r["n"],
        gone_states={0},
        interval=0,
        max_attempts=5,
        sleep=_Sleeper(),
    )
