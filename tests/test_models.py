from datetime import datetime, timezone

import pytest

from configdrill.models import ResourceHandle, ScenarioResult, SweepResult


def test_handle_validates_status_and_action():
    with pytest.raises(ValueError):
        ResourceHandle(kind="ec2:volume", identifier="vol-1", status="LOST")
    with pytest.raises(ValueError):
        ResourceHandle(kind="ec2:volume", identifier="vol-1", action="borrow")


def test_handle_round_trips_timestamps():
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)
    handle = ResourceHandle(kind="iam:user", identifier="drill-user", created_at=created)
    restored = ResourceHandle.from_dict(handle.to_dict())
    assert restored.created_at == created
    assert restored.status == "ACTIVE"


def test_scenario_failed_flag():
    assert ScenarioResult(rule="r", title="t", service="s", status="MISCONFIGURED").failed is True
    assert ScenarioResult(rule="r", title="t", service="s", status="NON_COMPLIANT").failed is False


def test_sweep_result_rejects_unknown_mode():
    with pytest.raises(ValueError):
        SweepResult("arn", "ec2", "volume", "vol-1", mode="MAYBE", deleted=False, message="")
