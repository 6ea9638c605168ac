from datetime import datetime, timezone

import pytest

from configdrill.models import BatchResult, BatchSummary, ResourceHandle, ScenarioResult
from configdrill.reports import CSV_HEADER, load_result, render_csv, write_csv, write_json


def _sample_result() -> BatchResult:
    started = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
    finished = datetime(2024, 1, 1, 0, 1, 30, tzinfo=timezone.utc)
    scenario = ScenarioResult(
        rule="encrypted-volumes",
        title="EBS volume is not encrypted",
        service="ec2",
        status="NON_COMPLIANT",
        evidence={"encrypted": False},
        resources=[ResourceHandle(kind="ec2:volume", identifier="vol-1", status="RELEASED", created_at=started)],
        started_at=started,
        finished_at=finished,
    )
    return BatchResult(
        account_id="123456789012",
        region="us-east-1",
        started_at=started,
        finished_at=finished,
        results=[scenario],
        summary=BatchSummary(NON_COMPLIANT=1, total=1),
    )


def test_render_csv_has_header_and_rows():
    lines = render_csv(_sample_result()).splitlines()
    assert lines[0] == ",".join(CSV_HEADER)
    assert lines[1].startswith("encrypted-volumes,EBS volume is not encrypted,ec2,NON_COMPLIANT,ec2:volume=vol-1,0,90.0,")


def test_json_report_loads_back(tmp_path):
    path = write_json(_sample_result(), tmp_path / "nested" / "report.json")
    data = load_result(path)
    assert data["summary"]["NON_COMPLIANT"] == 1
    scenario = ScenarioResult.from_dict(data["results"][0])
    assert scenario.duration_seconds == 90.0
    assert scenario.resources[0].status == "RELEASED"


def test_write_csv_creates_parent_directories(tmp_path):
    path = write_csv(_sample_result(), tmp_path / "out" / "report.csv")
    assert path.read_text(encoding="utf-8").startswith("rule,title")


def test_load_result_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_result(tmp_path / "absent.json")


def test_invalid_status_rejected():
    with pytest.raises(ValueError):
        ScenarioResult(rule="x", title="x", service="x", status="MAYBE")
