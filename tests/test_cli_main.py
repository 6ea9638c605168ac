import json
from datetime import datetime, timezone

import pytest

from cli import main as cli_main
from cli.main import EXIT_FAILURE, EXIT_SUCCESS
from configdrill.models import BatchResult, BatchSummary, ScenarioResult, SweepResult

AWS_VARIABLES = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_SESSION_TOKEN", "AWS_PROFILE")


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli_main, "load_dotenv", lambda *args, **kwargs: False)
    for name in AWS_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIDEXAMPLE")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "not-a-real-secret")
    monkeypatch.setenv("AWS_REGION", "us-east-1")


def _sample_result(status: str = "NON_COMPLIANT") -> BatchResult:
    timestamp = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
    scenario = ScenarioResult(
        rule="encrypted-volumes",
        title="EBS volume is not encrypted",
        service="ec2",
        status=status,
        error="boom" if status == "ERROR" else None,
        started_at=timestamp,
        finished_at=timestamp,
    )
    summary = BatchSummary(total=1, **{status: 1})
    return BatchResult(
        account_id="123456789012",
        region="us-east-1",
        started_at=timestamp,
        finished_at=timestamp,
        results=[scenario],
        summary=summary,
    )


def _engine_stub(result, captured):
    class _EngineStub:
        def __init__(self, settings):
            captured["settings"] = settings

        def run(self, rules):
            captured["rules"] = rules
            return result

    return _EngineStub


def test_missing_credentials_fail_before_engine(monkeypatch, capsys):
    def _no_engine(settings):
        raise AssertionError("engine must not be built without credentials")

    monkeypatch.setattr(cli_main, "Engine", _no_engine)

    exit_code = cli_main.main(["run", "encrypted-volumes"])

    assert exit_code == EXIT_FAILURE
    assert "Error: Missing required configuration" in capsys.readouterr().err


def test_run_writes_json(tmp_path, monkeypatch, credentials):
    captured = {}
    monkeypatch.setattr(cli_main, "Engine", _engine_stub(_sample_result(), captured))

    out_path = tmp_path / "report.json"
    exit_code = cli_main.main(["run", "Encrypted-Volumes", "--keep", "--format", "json", "--out", str(out_path)])

    assert exit_code == EXIT_SUCCESS
    payload = json.loads(out_path.read_text())
    assert payload["results"][0]["status"] == "NON_COMPLIANT"
    assert captured["rules"] == ["encrypted-volumes"]
    assert captured["settings"].keep_resources is True


def test_run_exits_non_zero_when_a_scenario_errors(monkeypatch, credentials, capsys):
    monkeypatch.setattr(cli_main, "Engine", _engine_stub(_sample_result("ERROR"), {}))

    exit_code = cli_main.main(["run", "--service", "ec2"])

    assert exit_code == EXIT_FAILURE
    assert "ERROR" in capsys.readouterr().out


def test_run_without_rules_is_an_error(credentials, capsys):
    assert cli_main.main(["run"]) == EXIT_FAILURE
    assert "Specify one or more rule names" in capsys.readouterr().err


def test_select_rules_filters_by_service():
    registry = {
        "restricted-ssh": type("M", (), {"META": {"service": "ec2"}}),
        "iam-password-policy": type("M", (), {"META": {"service": "iam"}}),
    }
    assert cli_main.select_rules([], service="IAM", registry=registry) == ["iam-password-policy"]
    assert cli_main.select_rules(["restricted-ssh", "nope"], registry=registry) == ["restricted-ssh"]
    with pytest.raises(ValueError):
        cli_main.select_rules(["nope"], registry=registry)


def test_list_command(capsys):
    assert cli_main.main(["list", "--service", "acm"]) == EXIT_SUCCESS
    output = capsys.readouterr().out
    assert "acm-certificate-expiration-check" in output
    assert "DOMAIN_NAME" in output
    assert "restricted-ssh" not in output


def test_summary_and_results_commands(tmp_path, capsys):
    result_path = tmp_path / "run.json"
    result_path.write_text(json.dumps(_sample_result().to_dict()))

    assert cli_main.main(["summary", "--from", str(result_path)]) == EXIT_SUCCESS
    summary = capsys.readouterr().out
    assert "config-drill Run Summary" in summary
    assert "Non-compliant  : 1" in summary

    assert cli_main.main(["results", "--from", str(result_path)]) == EXIT_SUCCESS
    assert "encrypted-volumes" in capsys.readouterr().out


def test_missing_env_file(tmp_path, capsys):
    exit_code = cli_main.main(["--env-file", str(tmp_path / "absent.env"), "list"])
    assert exit_code == EXIT_FAILURE
    assert "absent.env" in capsys.readouterr().err


def test_sweep_reports_failures(monkeypatch, credentials, capsys):
    captured = {}

    def fake_sweep(settings, clients, *, apply_changes, tag_key):
        captured.update(apply_changes=apply_changes, tag_key=tag_key, clients=clients)
        return [
            SweepResult("arn:aws:ec2:us-east-1:1:volume/vol-1", "ec2", "volume", "vol-1", "APPLY", True, "Deleted"),
            SweepResult("arn:aws:ec2:us-east-1:1:vpc/vpc-1", "ec2", "vpc", "vpc-1", "FAILED", False, "failed", "busy"),
        ]

    monkeypatch.setattr(cli_main, "ClientPool", lambda settings: "pool")
    monkeypatch.setattr(cli_main, "sweep", fake_sweep)

    exit_code = cli_main.main(["sweep", "--apply", "--tag-key", "drill"])

    assert exit_code == EXIT_FAILURE
    assert captured == {"apply_changes": True, "tag_key": "drill", "clients": "pool"}
    assert "vol-1" in capsys.readouterr().out


def test_sweep_dry_run_with_nothing_found(monkeypatch, credentials, capsys):
    monkeypatch.setattr(cli_main, "ClientPool", lambda settings: "pool")
    monkeypatch.setattr(cli_main, "sweep", lambda *args, **kwargs: [])

    assert cli_main.main(["sweep"]) == EXIT_SUCCESS
    assert "No resources tagged simulation-mas" in capsys.readouterr().out
