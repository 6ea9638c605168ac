"""cloud-trail-log-file-validation-enabled - trail without digest files."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_trail, create_trail_bucket
from configdrill.settings import Settings

META = {
    "rule": "cloud-trail-log-file-validation-enabled",
    "title": "CloudTrail log file validation disabled",
    "service": "cloudtrail",
    "resource_type": "AWS::CloudTrail::Trail",
    "required_env": [],
}


def describe_trail(cloudtrail: Any, name: str) -> Dict[str, Any]:
    trails = cloudtrail.describe_trails(trailNameList=[name]).get("trailList", [])
    if not trails:
        raise RuntimeError(f"Trail {name} not found")
    return trails[0]


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    bucket = create_trail_bucket(settings, clients, ledger, rule=META["rule"])
    trail = create_trail(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="no-validation-trail",
        bucket=bucket,
        EnableLogFileValidation=False,
    )
    return {"trail": trail["Name"], "bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    trail = describe_trail(clients["cloudtrail"], state["trail"])
    enabled = bool(trail.get("LogFileValidationEnabled"))
    return {"compliant": enabled, "evidence": {"trail": state["trail"], "log_file_validation": enabled}}
