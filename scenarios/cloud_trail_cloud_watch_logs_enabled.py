"""cloud-trail-cloud-watch-logs-enabled - trail that only delivers to S3."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_trail, create_trail_bucket
from configdrill.settings import Settings

from scenarios.cloud_trail_log_file_validation_enabled import describe_trail

META = {
    "rule": "cloud-trail-cloud-watch-logs-enabled",
    "title": "CloudTrail not sending events to CloudWatch Logs",
    "service": "cloudtrail",
    "resource_type": "AWS::CloudTrail::Trail",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    bucket = create_trail_bucket(settings, clients, ledger, rule=META["rule"])
    trail = create_trail(settings, clients, ledger, rule=META["rule"], prefix="s3-only-trail", bucket=bucket)
    return {"trail": trail["Name"], "bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    log_group = describe_trail(clients["cloudtrail"], state["trail"]).get("CloudWatchLogsLogGroupArn")
    return {"compliant": bool(log_group), "evidence": {"trail": state["trail"], "log_group_arn": log_group}}
