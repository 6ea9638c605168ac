"""cloudwatch-log-group-encrypted - log group without a KMS key."""

from __future__ import annotations

from typing import Any, Dict, List

from configdrill.ledger import ResourceLedger
from configdrill.naming import unique_name
from configdrill.provision import create_log_group
from configdrill.settings import Settings

META = {
    "rule": "cloudwatch-log-group-encrypted",
    "title": "CloudWatch log group not encrypted with KMS",
    "service": "logs",
    "resource_type": "AWS::Logs::LogGroup",
    "required_env": [],
}


def describe_log_group(logs: Any, name: str) -> Dict[str, Any]:
    groups: List[Dict[str, Any]] = logs.describe_log_groups(logGroupNamePrefix=name).get("logGroups", [])
    for group in groups:
        if group["logGroupName"] == name:
            return group
    raise RuntimeError(f"Log group {name} not found")


def provision(*, settings: Settings, clients: Dict[str, Any], ledger: ResourceLedger) -> Dict[str, Any]:
    name = create_log_group(
        settings, clients, ledger, rule=META["rule"], name=f"/config-drill/{unique_name('unencrypted')}"
    )
    return {"log_group": name}


def inspect(*, settings: Settings, clients: Dict[str, Any], state: Dict[str, Any]) -> Dict[str, Any]:
    key_id = describe_log_group(clients["logs"], state["log_group"]).get("kmsKeyId")
    return {"compliant": bool(key_id), "evidence": {"log_group": state["log_group"], "kms_key_id": key_id}}
