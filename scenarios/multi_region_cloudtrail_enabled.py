"""multi-region-cloudtrail-enabled - single-region trail."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_trail, create_trail_bucket
from configdrill.settings import Settings

from scenarios.cloud_trail_log_file_validation_enabled import describe_trail

META = {
    "rule": "multi-region-cloudtrail-enabled",
    "title": "CloudTrail trail is single-region",
    "service": "cloudtrail",
    "resource_type": "AWS::CloudTrail::Trail",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    bucket = create_trail_bucket(settings, clients, ledger, rule=META["rule"])
    trail = create_trail(
        settings,
        clients,
        ledger,
        rule=META["rule"],
        prefix="single-region-trail",
        bucket=bucket,
        IsMultiRegionTrail=False,
        IncludeGlobalServiceEvents=True,
    )
    return {"trail": trail["Name"], "bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    multi_region = bool(describe_trail(clients["cloudtrail"], state["trail"]).get("IsMultiRegionTrail"))
    return {"compliant": multi_region, "evidence": {"trail": state["trail"], "multi_region": multi_region}}
