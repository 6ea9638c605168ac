"""cloud-trail-encryption-enabled - trail delivering logs without SSE-KMS."""

from __future__ import annotations

from typing import Any, Dict

from configdrill.ledger import ResourceLedger
from configdrill.provision import create_trail, create_trail_bucket
from configdrill.settings import Settings

from scenarios.cloud_trail_log_file_validation_enabled import describe_trail

META = {
    "rule": "cloud-trail-encryption-enabled",
    "title": "CloudTrail logs not encrypted with KMS",
    "service": "cloudtrail",
    "resource_type": "AWS::CloudTrail::Trail",
    "required_env": [],
}


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    bucket = create_trail_bucket(settings, clients, ledger, rule=META["rule"])
    trail = create_trail(settings, clients, ledger, rule=META["rule"], prefix="unencrypted-trail", bucket=bucket)
    return {"trail": trail["Name"], "bucket": bucket}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    key_id = describe_trail(clients["cloudtrail"], state["trail"]).get("KmsKeyId")
    return {"compliant": bool(key_id), "evidence": {"trail": state["trail"], "kms_key_id": key_id}}
